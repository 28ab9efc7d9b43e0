"""Main CLI entry point for spec-grep."""

import json
import sys
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from specgrep import __version__
from specgrep.core.exceptions import ConfigError, ExtractionError
from specgrep.core.logging import configure_logging
from specgrep.core.settings import GrepSettings, get_settings
from specgrep.grep.parser import parse_grep
from specgrep.grep.tags import get_mentioned_tags
from specgrep.plugin import get_grep_settings
from specgrep.runtime import TestStatus, plan_suite
from specgrep.selection.discovery import list_candidate_specs, resolve_file_patterns
from specgrep.selection.orchestrator import select_specs

EXIT_SUCCESS = 0
EXIT_ERROR = 2


def load_host_config(path: Path) -> dict[str, Any]:
    """Load a host runner configuration from a YAML or JSON file.

    Relative folders in the configuration are resolved against the directory
    of the file.

    Raises:
        ConfigError: If the file cannot be read or is not a mapping
    """
    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config file must hold a mapping: {path}")

    base_dir = path.parent
    if "specPattern" in config:
        root = Path(config.get("projectRoot") or base_dir)
        config["projectRoot"] = str(root if root.is_absolute() else base_dir / root)
    elif config.get("integrationFolder"):
        folder = Path(config["integrationFolder"])
        if not folder.is_absolute():
            config["integrationFolder"] = str(base_dir / folder)

    env = config.get("env")
    config["env"] = dict(env) if isinstance(env, dict) else {}
    return config


@click.group(invoke_without_command=True)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
@click.option(
    "--json-logs/--console-logs",
    default=None,
    help="Log format (auto-detected from the terminal by default)",
)
@click.version_option(version=__version__, prog_name="specgrep")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, json_logs: bool | None) -> None:
    """spec-grep - select spec files and tests by title and tags.

    Examples:

      # Spec files containing @smoke tests
      specgrep select runner.config.yaml --tags @smoke

      # How the tests of one file would run
      specgrep plan specs/login.yaml --tags "@smoke+-@slow" --burn 3

      # Inspect a tag expression
      specgrep tags "@smoke,@fast+-@flaky"
    """
    overrides: dict[str, Any] = {}
    if verbose:
        overrides["log_level"] = "DEBUG"
    if json_logs is not None:
        overrides["json_logs"] = json_logs
    settings = get_settings(**overrides)
    configure_logging(
        level=settings.log_level,
        json_output=settings.json_logs,
        log_file=settings.log_file,
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(name="version")
def version_cmd() -> None:
    """Show spec-grep version information."""
    click.echo(f"specgrep {__version__}")
    click.echo(f"Python {sys.version.split()[0]}")


@cli.command(name="select")
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.option("--grep", "-g", default=None, help="Title substring filter")
@click.option("--tags", "-t", "grep_tags", default=None, help="Tag expression")
@click.option("--prefix-at", is_flag=True, help="Force every tag to start with @")
@click.option("--spec", default=None, help="Glob restricting the candidate specs")
@click.option(
    "--extra-specs",
    default=None,
    help="Glob of spec files that always run",
)
@click.option("--json", "as_json", is_flag=True, help="Print the selection as JSON")
def select_cmd(
    config_file: Path,
    grep: str | None,
    grep_tags: str | None,
    prefix_at: bool,
    spec: str | None,
    extra_specs: str | None,
    as_json: bool,
) -> None:
    """Select the spec files a host configuration should run.

    Options given on the command line override the configuration env.

    Examples:

      specgrep select runner.config.yaml --tags @smoke
      specgrep select runner.config.yaml --grep "logs in" --json
    """
    try:
        config = load_host_config(config_file)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    env = config["env"]
    for key, value in (
        ("grep", grep),
        ("grepTags", grep_tags),
        ("grepSpec", spec),
        ("grepExtraSpecs", extra_specs),
    ):
        if value is not None:
            env[key] = value
    if prefix_at:
        env["grepPrefixAt"] = True

    settings = get_grep_settings(config)
    result = select_specs(
        settings,
        list_candidate_specs(config),
        resolve_patterns=lambda patterns: resolve_file_patterns(
            patterns, root=str(config_file.parent)
        ),
    )

    if as_json:
        payload = {
            "specs": result.specs,
            "extraSpecs": result.extra_specs,
            "runAll": result.run_all,
            "unknownTags": result.unknown_tags,
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        for path in result.specs:
            click.echo(path)

    sys.exit(EXIT_SUCCESS)


@cli.command(name="plan")
@click.argument("spec_file", type=click.Path(exists=True, path_type=Path))
@click.option("--grep", "-g", default=None, help="Title substring filter")
@click.option("--tags", "-t", "grep_tags", default=None, help="Tag expression")
@click.option("--burn", type=int, default=None, help="Repeat matched tests N times")
@click.option("--untagged", is_flag=True, help="Run only tests without tags")
@click.option(
    "--omit-filtered",
    is_flag=True,
    help="Leave filtered tests out instead of marking them pending",
)
@click.option("--prefix-at", is_flag=True, help="Force every tag to start with @")
@click.option("--json", "as_json", is_flag=True, help="Print the plan as JSON")
def plan_cmd(
    spec_file: Path,
    grep: str | None,
    grep_tags: str | None,
    burn: int | None,
    untagged: bool,
    omit_filtered: bool,
    prefix_at: bool,
    as_json: bool,
) -> None:
    """Show how the tests of a spec file would run.

    Examples:

      specgrep plan specs/login.yaml --tags @smoke
      specgrep plan specs/login.yaml --grep "logs in" --burn 5
    """
    settings = GrepSettings(
        grep=grep,
        grep_tags=grep_tags,
        grep_burn=burn,
        grep_untagged=untagged,
        grep_omit_filtered=omit_filtered,
        grep_prefix_at=prefix_at,
    )

    try:
        planned = plan_suite(spec_file, settings)
    except ExtractionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if as_json:
        click.echo(
            json.dumps([test.model_dump(mode="json") for test in planned], indent=2)
        )
        sys.exit(EXIT_SUCCESS)

    table = Table(title=str(spec_file), show_header=True, header_style="bold cyan")
    table.add_column("Test", style="white")
    table.add_column("Status", no_wrap=True)
    for test in planned:
        style = "green" if test.status == TestStatus.RUN else "yellow"
        table.add_row(test.title, f"[{style}]{test.status.value}[/{style}]")

    Console().print(table)
    sys.exit(EXIT_SUCCESS)


@cli.command(name="tags")
@click.argument("expression")
@click.option("--prefix-at", is_flag=True, help="Force every tag to start with @")
def tags_cmd(expression: str, prefix_at: bool) -> None:
    """Show how a tag expression is parsed.

    Examples:

      specgrep tags "@smoke+-@slow,@regression"
    """
    parsed = parse_grep(None, expression, prefix_at)

    click.echo("Groups (any group must match):")
    if not parsed.tags:
        click.echo("  (none - every test matches)")
    for group in parsed.tags:
        click.echo(f"  {group}")

    click.echo("Mentioned tags:")
    for tag in get_mentioned_tags(expression, prefix_at):
        click.echo(f"  {tag}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
