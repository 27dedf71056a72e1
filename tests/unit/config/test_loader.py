"""Unit tests for TOML configuration loader."""

import tomllib
from collections.abc import Callable
from pathlib import Path

import pytest

from scholar.config.loader import (
    deep_merge,
    get_config_dir,
    get_environment,
    load_config,
    load_toml,
)


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_merge_nested_dicts(self) -> None:
        """Nested dictionaries are merged recursively."""
        base = {"ai": {"model": "gpt-4", "rate_limiting": {"requests_per_minute": 60}}}
        override = {"ai": {"rate_limiting": {"tokens_per_minute": 1000}}}
        result = deep_merge(base, override)
        assert result == {
            "ai": {
                "model": "gpt-4",
                "rate_limiting": {"requests_per_minute": 60, "tokens_per_minute": 1000},
            }
        }

    def test_override_replaces_non_dict(self) -> None:
        """Non-dict values in override replace base values."""
        assert deep_merge({"a": {"x": 1}}, {"a": "replaced"}) == {"a": "replaced"}

    def test_base_unmodified(self) -> None:
        """Original base dictionary is not modified."""
        base = {"a": 1}
        deep_merge(base, {"b": 2})
        assert base == {"a": 1}


class TestLoadToml:
    """Tests for load_toml function."""

    def test_load_valid_toml(self, tmp_path: Path) -> None:
        """Valid TOML file is loaded correctly."""
        toml_file = tmp_path / "test.toml"
        toml_file.write_text('[ai]\nmodel = "gpt-4o"\nmax_retries = 5')
        assert load_toml(toml_file) == {"ai": {"model": "gpt-4o", "max_retries": 5}}

    def test_load_missing_file_raises(self, tmp_path: Path) -> None:
        """Missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_toml(tmp_path / "nonexistent.toml")

    def test_load_invalid_toml_raises(self, tmp_path: Path) -> None:
        """Invalid TOML syntax raises error."""
        invalid_file = tmp_path / "invalid.toml"
        invalid_file.write_text("invalid = [unclosed")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_toml(invalid_file)


class TestEnvironment:
    """Tests for get_environment and get_config_dir."""

    def test_returns_env_var_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Returns SCHOLAR_ENV value when set."""
        monkeypatch.setenv("SCHOLAR_ENV", "production")
        assert get_environment() == "production"

    def test_defaults_to_development(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Defaults to 'development' when SCHOLAR_ENV is not set."""
        monkeypatch.delenv("SCHOLAR_ENV", raising=False)
        assert get_environment() == "development"

    def test_uses_config_dir_env_var(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Uses SCHOLAR_CONFIG_DIR when set."""
        monkeypatch.setenv("SCHOLAR_CONFIG_DIR", str(test_config_dir))
        assert get_config_dir() == test_config_dir

    def test_raises_for_missing_config_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Raises when SCHOLAR_CONFIG_DIR doesn't exist."""
        monkeypatch.setenv("SCHOLAR_CONFIG_DIR", str(tmp_path / "missing"))
        with pytest.raises(FileNotFoundError):
            get_config_dir()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_merges_environment_config(
        self,
        test_config_dir: Path,
        mock_toml_files: Callable[[dict[str, str]], None],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Environment config overrides default config."""
        mock_toml_files({
            "default.toml": "app_name = 'test'\n[ai]\nmodel = 'gpt-4'\nmax_retries = 3",
            "staging.toml": "[ai]\nmax_retries = 5",
        })
        monkeypatch.setenv("SCHOLAR_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("SCHOLAR_ENV", "staging")

        assert load_config() == {"app_name": "test", "ai": {"model": "gpt-4", "max_retries": 5}}

    def test_missing_files_give_empty_config(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without TOML files code defaults apply."""
        monkeypatch.setenv("SCHOLAR_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("SCHOLAR_ENV", "nonexistent")
        assert load_config() == {}

    def test_repository_defaults_load(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The shipped config/default.toml is valid."""
        config_dir = Path(__file__).parents[3] / "config"
        monkeypatch.setenv("SCHOLAR_CONFIG_DIR", str(config_dir))
        monkeypatch.setenv("SCHOLAR_ENV", "production")

        config = load_config()
        assert config["ai"]["rate_limiting"]["requests_per_minute"] == 60
