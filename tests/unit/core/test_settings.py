"""Tests for spec-grep configuration."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from specgrep.core.settings import (
    GrepSettings,
    SpecGrepSettings,
    _find_config_file,
    _load_yaml_config,
    get_settings,
)


class TestGrepSettings:
    """Tests for GrepSettings parsing of the host env mapping."""

    def test_default_values(self) -> None:
        """Test an empty env disables every option."""
        settings = GrepSettings.from_env({})
        assert settings.grep is None
        assert settings.grep_tags is None
        assert settings.grep_burn is None
        assert settings.grep_untagged is False
        assert settings.grep_omit_filtered is False
        assert settings.grep_filter_specs is False
        assert settings.grep_prefix_at is False
        assert settings.grep_spec is None
        assert settings.grep_extra_specs is None
        assert not settings.filter_active

    def test_none_env(self) -> None:
        assert GrepSettings.from_env(None) == GrepSettings()

    @pytest.mark.parametrize("key", ["grepTags", "grep-tags", "grep_tags"])
    def test_tag_aliases(self, key: str) -> None:
        assert GrepSettings.from_env({key: "@smoke"}).grep_tags == "@smoke"

    @pytest.mark.parametrize("key", ["burn", "grepBurn", "grep-burn"])
    def test_burn_aliases(self, key: str) -> None:
        assert GrepSettings.from_env({key: 5}).grep_burn == 5

    def test_spec_aliases(self) -> None:
        assert GrepSettings.from_env({"grepSpec": "a*"}).grep_spec == "a*"
        assert GrepSettings.from_env({"grepSpecs": "b*"}).grep_spec == "b*"

    def test_unknown_keys_ignored(self) -> None:
        settings = GrepSettings.from_env({"apiUrl": "http://localhost", "grep": "x"})
        assert settings.grep == "x"

    def test_numbers_become_strings(self) -> None:
        """Runners may parse CLI values as numbers."""
        settings = GrepSettings.from_env({"grep": 123, "grepTags": 42})
        assert settings.grep == "123"
        assert settings.grep_tags == "42"

    def test_empty_strings_are_unset(self) -> None:
        settings = GrepSettings.from_env({"grep": "", "grepTags": False})
        assert settings.grep is None
        assert settings.grep_tags is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            ("true", True),
            ("yes", True),
            (1, True),
            (False, False),
            ("false", False),
            ("0", False),
            ("", False),
            (None, False),
        ],
    )
    def test_flag_coercion(self, value: object, expected: bool) -> None:
        settings = GrepSettings.from_env({"grepUntagged": value})
        assert settings.grep_untagged is expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, True),
            ("true", True),
            (" TRUE ", True),
            ("1", False),
            (1, False),
            ("yes", False),
            (False, False),
        ],
    )
    def test_filter_specs_needs_explicit_true(
        self, value: object, expected: bool
    ) -> None:
        settings = GrepSettings.from_env({"grepFilterSpecs": value})
        assert settings.grep_filter_specs is expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("3", 3),
            (3, 3),
            (0, None),
            (-2, None),
            ("", None),
            (None, None),
        ],
    )
    def test_burn_coercion(self, value: object, expected: int | None) -> None:
        assert GrepSettings.from_env({"burn": value}).grep_burn == expected

    def test_invalid_burn_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            settings = GrepSettings.from_env({"burn": "many"})
        assert settings.grep_burn is None
        assert "ignoring invalid burn count" in caplog.text

    def test_extra_specs(self) -> None:
        single = GrepSettings.from_env({"grepExtraSpecs": "a/*"})
        assert single.grep_extra_specs == "a/*"
        many = GrepSettings.from_env({"grepExtraSpecs": ["a/*", "b/*"]})
        assert many.grep_extra_specs == ["a/*", "b/*"]
        empty = GrepSettings.from_env({"grepExtraSpecs": ""})
        assert empty.grep_extra_specs is None

    def test_filter_active(self) -> None:
        assert GrepSettings(grep="x").filter_active
        assert GrepSettings(grep_tags="@a").filter_active
        assert not GrepSettings(grep_untagged=True).filter_active

    def test_frozen(self) -> None:
        settings = GrepSettings(grep="x")
        with pytest.raises(ValidationError):
            settings.grep = "y"  # type: ignore[misc]


class TestSpecGrepSettings:
    """Tests for application settings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        settings = SpecGrepSettings(_skip_file_loading=True)
        assert settings.log_level == "INFO"
        assert settings.json_logs is None
        assert settings.log_file is None

    def test_log_level_normalized(self) -> None:
        settings = SpecGrepSettings(_skip_file_loading=True, log_level="debug")
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            SpecGrepSettings(_skip_file_loading=True, log_level="LOUD")

    def test_env_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test configuration from environment variables."""
        monkeypatch.setenv("SPECGREP_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("SPECGREP_JSON_LOGS", "true")
        settings = SpecGrepSettings(_skip_file_loading=True)
        assert settings.log_level == "WARNING"
        assert settings.json_logs is True

    def test_config_file_in_current_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "specgrep.config.yaml").write_text("log_level: ERROR\n")
        monkeypatch.chdir(tmp_path)
        settings = SpecGrepSettings()
        assert settings.log_level == "ERROR"

    def test_explicit_values_win_over_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "specgrep.config.yaml").write_text("log_level: ERROR\n")
        monkeypatch.chdir(tmp_path)
        settings = SpecGrepSettings(log_level="DEBUG")
        assert settings.log_level == "DEBUG"


class TestConfigFileHelpers:
    """Tests for config file discovery and loading."""

    def test_find_config_file_in_parent(self, tmp_path: Path) -> None:
        config = tmp_path / "specgrep.config.yml"
        config.write_text("log_level: DEBUG\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert _find_config_file(nested) == config

    def test_find_config_file_missing(self, tmp_path: Path) -> None:
        nested = tmp_path / "a"
        nested.mkdir()
        found = _find_config_file(nested)
        assert found is None or not str(found).startswith(str(tmp_path))

    def test_load_yaml_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("log_level: DEBUG\nlog_file: out.log\n")
        assert _load_yaml_config(path) == {"log_level": "DEBUG", "log_file": "out.log"}

    def test_load_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("log_level: [unclosed\n")
        assert _load_yaml_config(path) == {}

    def test_load_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        assert _load_yaml_config(path) == {}

    def test_load_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml_config(tmp_path / "missing.yaml") == {}


class TestGetSettings:
    """Tests for settings accessors."""

    def test_explicit_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("log_level: WARNING\nlog_file: specgrep.log\n")
        settings = get_settings(config_file=path, log_level="ERROR")
        assert settings.log_level == "ERROR"
        assert settings.log_file == "specgrep.log"

    def test_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        settings = get_settings(json_logs=False)
        assert settings.json_logs is False
