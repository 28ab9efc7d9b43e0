"""Plugin entry point applied to a host runner configuration.

Example:
    from specgrep import grep_plugin

    config = {
        "specPattern": "cypress/e2e/**/*.cy.yaml",
        "env": {"grepTags": "@smoke", "grepFilterSpecs": True},
    }
    grep_plugin(config)
    print(config["specPattern"])  # only specs with @smoke tests
"""

import logging
from collections.abc import Callable
from typing import Any

from specgrep import __version__
from specgrep.core.exceptions import InvocationError
from specgrep.core.settings import GrepSettings
from specgrep.grep.parser import parse_grep
from specgrep.selection.config_adapter import adapter_for
from specgrep.selection.discovery import list_candidate_specs, resolve_file_patterns
from specgrep.selection.extractors import SpecExtractor
from specgrep.selection.models import PatternResolver
from specgrep.selection.orchestrator import select_specs

logger = logging.getLogger(__name__)


def get_grep_settings(config: dict[str, Any]) -> GrepSettings:
    """Parse and announce the grep options of a host configuration."""
    env = config["env"]

    logger.debug("spec-grep version %s", __version__)
    logger.debug("config env object: %s", env)

    settings = GrepSettings.from_env(env)

    if settings.grep:
        logger.info('spec-grep: tests with "%s" in their names', settings.grep.strip())

    if settings.grep_tags:
        logger.info('spec-grep: filtering using tag(s) "%s"', settings.grep_tags)
        parsed = parse_grep(None, settings.grep_tags, settings.grep_prefix_at)
        logger.debug("parsed grep tags %s", [str(group) for group in parsed.tags])

    if settings.grep_burn:
        logger.info("spec-grep: running filtered tests %d times", settings.grep_burn)

    if settings.grep_untagged:
        logger.info("spec-grep: running untagged tests")

    if settings.grep_omit_filtered:
        logger.info("spec-grep: will omit filtered tests")

    if settings.grep_prefix_at:
        logger.info("spec-grep: all tags will be forced to start with @")

    return settings


def grep_plugin(
    *args: Any,
    list_specs: Callable[[dict[str, Any]], list[str]] = list_candidate_specs,
    extractor: SpecExtractor | None = None,
    resolve_patterns: PatternResolver = resolve_file_patterns,
) -> Any:
    """Filter the spec files of a host configuration in place.

    Args:
        *args: Exactly one host configuration mapping
        list_specs: Enumerates candidate spec files for the configuration
        extractor: Reads titles and tags from spec files
        resolve_patterns: Resolves the extra-specs glob

    Returns:
        The same configuration object

    Raises:
        InvocationError: If called with no configuration or more than one argument
    """
    if len(args) == 0:
        raise InvocationError("ERROR: forgot the config object")
    if len(args) > 1:
        raise InvocationError("ERROR: too many arguments, pass only the config object")

    config = args[0]
    if not config or not isinstance(config.get("env"), dict):
        return config

    settings = get_grep_settings(config)
    if not settings.grep_filter_specs:
        return config

    result = select_specs(
        settings,
        list_specs(config),
        extractor=extractor,
        resolve_patterns=resolve_patterns,
    )

    if settings.grep_extra_specs:
        config["env"]["grepExtraSpecs"] = list(result.extra_specs)

    if not result.run_all:
        adapter_for(config).apply(config, result.specs)

    return config
