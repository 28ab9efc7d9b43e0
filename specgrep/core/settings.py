"""spec-grep configuration.

Two kinds of configuration live here:

1. ``GrepSettings`` - the filter options a user passes to the plugin through
   the host configuration ``env`` mapping. Both camelCase and kebab-case keys
   are accepted (``grepTags`` / ``grep-tags``).
2. ``SpecGrepSettings`` - application settings (logging) loaded with the
   following priority (highest to lowest):
   1. Explicit overrides
   2. Environment variables (with SPECGREP_ prefix)
   3. Configuration file (specgrep.config.yaml)
   4. Default values

Example usage:
    from specgrep.core.settings import GrepSettings

    settings = GrepSettings.model_validate({"grepTags": "@smoke", "burn": 3})
    print(settings.grep_tags, settings.grep_burn)
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Default config file names to search for
CONFIG_FILE_NAMES = ["specgrep.config.yaml", "specgrep.config.yml"]

_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


def _truthy(value: Any) -> bool:
    """Interpret an env value the way a loosely typed runner would."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


class GrepSettings(BaseModel):
    """Filter options recognised in the host configuration ``env`` mapping."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    grep: str | None = Field(
        default=None,
        description="Title substring filter",
    )
    grep_tags: str | None = Field(
        default=None,
        validation_alias=AliasChoices("grep_tags", "grepTags", "grep-tags"),
        description="Tag expression filter",
    )
    grep_prefix_at: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "grep_prefix_at", "grepPrefixAt", "grep-prefix-at"
        ),
        description="Force every tag to start with @",
    )
    grep_burn: int | None = Field(
        default=None,
        validation_alias=AliasChoices("grep_burn", "grepBurn", "grep-burn", "burn"),
        description="Number of times to repeat each matched test",
    )
    grep_untagged: bool = Field(
        default=False,
        validation_alias=AliasChoices("grep_untagged", "grepUntagged", "grep-untagged"),
        description="Run tests without any tags",
    )
    grep_omit_filtered: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "grep_omit_filtered", "grepOmitFiltered", "grep-omit-filtered"
        ),
        description="Omit filtered tests instead of reporting them as pending",
    )
    grep_filter_specs: bool = Field(
        default=False,
        validation_alias=AliasChoices("grep_filter_specs", "grepFilterSpecs"),
        description="Enable spec file pre-filtering",
    )
    grep_spec: str | None = Field(
        default=None,
        validation_alias=AliasChoices("grep_spec", "grepSpec", "grepSpecs"),
        description="Glob restricting the candidate spec files",
    )
    grep_extra_specs: str | list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("grep_extra_specs", "grepExtraSpecs"),
        description="Glob(s) of spec files that always run",
    )

    @field_validator("grep", "grep_tags", "grep_spec", mode="before")
    @classmethod
    def coerce_optional_string(cls, v: Any) -> str | None:
        """Turn numbers into strings and empty values into None."""
        if v is None or v is False or v == "":
            return None
        return str(v)

    @field_validator(
        "grep_prefix_at", "grep_untagged", "grep_omit_filtered", mode="before"
    )
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        """Accept any truthy value as an enabled flag."""
        return _truthy(v)

    @field_validator("grep_filter_specs", mode="before")
    @classmethod
    def coerce_filter_specs(cls, v: Any) -> bool:
        """Only an explicit true enables spec filtering."""
        if isinstance(v, str):
            return v.strip().lower() == "true"
        return v is True

    @field_validator("grep_burn", mode="before")
    @classmethod
    def coerce_burn(cls, v: Any) -> int | None:
        """Parse the burn count leniently; unusable values disable burning."""
        if v is None or v is False or v == "":
            return None
        try:
            burn = int(v)
        except (TypeError, ValueError):
            logger.warning("spec-grep: ignoring invalid burn count %r", v)
            return None
        return burn if burn > 0 else None

    @field_validator("grep_extra_specs", mode="before")
    @classmethod
    def coerce_extra_specs(cls, v: Any) -> str | list[str] | None:
        """Drop empty extra-spec patterns."""
        if not v:
            return None
        return v

    @property
    def filter_active(self) -> bool:
        """Check if a title or tag filter is set."""
        return bool(self.grep or self.grep_tags)

    @classmethod
    def from_env(cls, env: dict[str, Any] | None) -> "GrepSettings":
        """Build settings from a host configuration ``env`` mapping."""
        return cls.model_validate(dict(env or {}))


def _find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file by searching current directory and parents.

    Args:
        start_dir: Directory to start search from.
            Defaults to current working directory.

    Returns:
        Path to config file if found, None otherwise.
    """
    search_dir = start_dir or Path.cwd()

    # Limit search depth to prevent infinite loops
    for _ in range(10):
        for filename in CONFIG_FILE_NAMES:
            config_path = search_dir / filename
            if config_path.exists():
                return config_path

        parent = search_dir.parent
        if parent == search_dir:
            break
        search_dir = parent

    return None


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Dictionary of configuration values.
    """
    try:
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
            return config if isinstance(config, dict) else {}
    except yaml.YAMLError as e:
        logger.warning("Failed to parse config file %s: %s", config_path, e)
        return {}
    except OSError as e:
        logger.warning("Failed to read config file %s: %s", config_path, e)
        return {}


class SpecGrepSettings(BaseSettings):
    """Application settings for the spec-grep CLI and library.

    Example:
        settings = SpecGrepSettings(log_level="DEBUG")
        print(settings.json_logs)
    """

    model_config = SettingsConfigDict(
        env_prefix="SPECGREP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    log_level: str = Field(
        default="INFO",
        description="Application log level",
    )
    json_logs: bool | None = Field(
        default=None,
        description="Emit JSON log lines. Auto-detected from the TTY when unset",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @model_validator(mode="before")
    @classmethod
    def load_from_config_file(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Merge values from specgrep.config.yaml under explicit values."""
        if data.get("_skip_file_loading"):
            data.pop("_skip_file_loading", None)
            return data

        config_path = _find_config_file()
        if config_path:
            file_config = _load_yaml_config(config_path)
            if file_config:
                logger.debug("Loaded configuration from %s", config_path)
                return {**file_config, **data}

        return data


def get_settings(
    config_file: Path | None = None,
    **overrides: Any,
) -> SpecGrepSettings:
    """Get spec-grep settings.

    Args:
        config_file: Optional explicit path to configuration file.
        **overrides: Explicit configuration overrides.

    Returns:
        Configured SpecGrepSettings instance.
    """
    if config_file and config_file.exists():
        file_config = _load_yaml_config(config_file)
        merged = {**file_config, **overrides, "_skip_file_loading": True}
        return SpecGrepSettings(**merged)

    return SpecGrepSettings(**overrides)
