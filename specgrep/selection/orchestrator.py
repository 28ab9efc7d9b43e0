"""Spec file selection.

Chooses the spec files that can contain tests matching the user's filter.
Selection is fail-open: a file that cannot be parsed is always kept so that
runtime filtering decides about its tests, and a filter that eliminates every
file is abandoned in favour of running everything.
"""

import logging
from collections.abc import Callable

from specgrep.core.exceptions import ExtractionError
from specgrep.core.logging import bind_context
from specgrep.core.settings import GrepSettings
from specgrep.grep.matcher import should_test_run
from specgrep.grep.parser import parse_grep
from specgrep.grep.tags import get_mentioned_tags
from specgrep.selection.discovery import matches_spec_pattern, resolve_file_patterns
from specgrep.selection.extractors import SpecExtractor, YamlSpecExtractor
from specgrep.selection.models import (
    FilterMode,
    PatternResolver,
    SelectionResult,
    SpecFile,
    TagMode,
    TitleMode,
    UntaggedEliminationMode,
)

logger = logging.getLogger(__name__)


def select_mode(settings: GrepSettings) -> FilterMode:
    """Pick the filter mode; a title grep wins over tags."""
    if settings.grep:
        return TitleMode(
            parsed=parse_grep(settings.grep, None, settings.grep_prefix_at),
            grep=settings.grep,
        )
    if settings.grep_tags:
        return TagMode(
            parsed=parse_grep(None, settings.grep_tags, settings.grep_prefix_at),
            grep_tags=settings.grep_tags,
            mentioned_tags=get_mentioned_tags(
                settings.grep_tags, settings.grep_prefix_at
            ),
        )
    return UntaggedEliminationMode()


def _keep_on_error(spec: SpecFile, check: Callable[[SpecFile], bool]) -> bool:
    """Run a per-file check, keeping the file when it cannot be parsed."""
    with bind_context(spec_file=spec.path):
        try:
            return check(spec)
        except ExtractionError as e:
            logger.debug("%s", e)
            logger.error("Could not determine test names in file: %s", spec.path)
            logger.error("Will run it to let the grep filter the tests")
            return True


def _filter_by_title(specs: list[SpecFile], mode: TitleMode) -> list[SpecFile]:
    logger.info('spec-grep: filtering specs using "%s" in the title', mode.grep)

    def has_matching_title(spec: SpecFile) -> bool:
        logger.debug("full test names: %s", spec.titles)
        return any(should_test_run(mode.parsed, title) for title in spec.titles)

    selected = [spec for spec in specs if _keep_on_error(spec, has_matching_title)]
    logger.debug('found grep "%s" in %d specs', mode.grep, len(selected))
    return selected


def _filter_by_tags(
    specs: list[SpecFile], mode: TagMode, found_tags: set[str]
) -> list[SpecFile]:
    logger.debug("user mentioned tags %s", mode.mentioned_tags)

    def has_matching_test(spec: SpecFile) -> bool:
        test_tags = spec.test_tags
        logger.debug("effective test tags %s", test_tags)
        for info in test_tags.values():
            found_tags.update(info.effective_tags)
            found_tags.update(info.required_tags)
        return any(
            should_test_run(
                mode.parsed,
                tags=info.effective_tags,
                required_tags=info.required_tags,
            )
            for info in test_tags.values()
        )

    selected = [spec for spec in specs if _keep_on_error(spec, has_matching_test)]
    logger.debug('found grep tags "%s" in %d specs', mode.grep_tags, len(selected))
    return selected


def _eliminate_required_only(specs: list[SpecFile]) -> list[SpecFile]:
    logger.debug("will try eliminating specs with required tags")

    def has_ungated_test(spec: SpecFile) -> bool:
        # Specs without a single runnable test are not worth starting
        return any(not info.required_tags for info in spec.test_tags.values())

    return [spec for spec in specs if _keep_on_error(spec, has_ungated_test)]


def select_specs(
    settings: GrepSettings,
    candidates: list[str],
    extractor: SpecExtractor | None = None,
    resolve_patterns: PatternResolver = resolve_file_patterns,
) -> SelectionResult:
    """Select the spec files to run.

    Args:
        settings: Grep options from the host configuration
        candidates: Candidate spec files in run order
        extractor: Reads titles and tags from spec files
        resolve_patterns: Resolves the extra-specs glob to file paths

    Returns:
        The selection; ``run_all`` is set when the filter eliminated every file
    """
    extractor = extractor or YamlSpecExtractor()
    result = SelectionResult()
    logger.debug("found %d spec file(s)", len(candidates))

    spec_paths = candidates
    if settings.grep_spec:
        logger.debug("custom spec pattern: %s", settings.grep_spec)
        spec_paths = [
            path
            for path in candidates
            if matches_spec_pattern(path, settings.grep_spec)
        ]
        logger.debug("pre-filtered specs %d %s", len(spec_paths), spec_paths)

    specs = [SpecFile(path=path, extractor=extractor) for path in spec_paths]
    mode = select_mode(settings)

    match mode:
        case TitleMode():
            selected = _filter_by_title(specs, mode)
        case TagMode():
            selected = _filter_by_tags(specs, mode, result.found_tags)
            logger.debug(
                "all found tags across the specs %s", sorted(result.found_tags)
            )
            for tag in mode.mentioned_tags:
                if tag not in result.found_tags:
                    result.unknown_tags.append(tag)
                    logger.warning(
                        'spec-grep: could not find the tag "%s" in any of the specs',
                        tag,
                    )
        case UntaggedEliminationMode():
            selected = _eliminate_required_only(specs)

    result.specs = [spec.path for spec in selected]

    if settings.grep_extra_specs:
        logger.debug(
            'processing the extra specs pattern "%s"', settings.grep_extra_specs
        )
        for path in resolve_patterns(settings.grep_extra_specs):
            if path not in result.specs:
                result.specs.append(path)
                result.extra_specs.append(path)
                logger.debug("added extra spec %s", path)

    if not result.specs:
        logger.warning("spec-grep: grep and/or grepTags has eliminated all specs")
        if settings.grep:
            logger.warning("spec-grep: title: %s", settings.grep)
        if settings.grep_tags:
            logger.warning("spec-grep: tags: %s", settings.grep_tags)
        logger.warning("spec-grep: Will leave all specs to run to filter at run-time")
        result.run_all = True
        result.specs = list(candidates)

    return result
