"""Unit tests for configuration system."""

from pathlib import Path
from typing import Any

import pytest
import yaml

from reposcope.config import (
    GitHubSettings,
    RepoScopeConfig,
    create_default_config,
    find_config_file,
    load_config,
    load_config_from_dict,
    substitute_env_vars,
)


class TestSubstituteEnvVars:
    """Tests for environment variable substitution."""

    def test_substitute_string(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env var in string."""
        monkeypatch.setenv("TEST_VAR", "test_value")

        assert substitute_env_vars("prefix_${TEST_VAR}_suffix") == "prefix_test_value_suffix"

    def test_substitute_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env vars in nested dicts and lists."""
        monkeypatch.setenv("API_KEY", "secret123")

        result = substitute_env_vars({"slot": {"api_key": "${API_KEY}"}, "items": ["${API_KEY}", 1]})

        assert result == {"slot": {"api_key": "secret123"}, "items": ["secret123", 1]}

    def test_missing_env_var_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that missing env var raises ValueError."""
        monkeypatch.delenv("REPOSCOPE_MISSING_VAR", raising=False)

        with pytest.raises(ValueError, match="Environment variable not set"):
            substitute_env_vars("${REPOSCOPE_MISSING_VAR}")

    def test_passthrough_non_string(self) -> None:
        """Test that non-string values pass through unchanged."""
        assert substitute_env_vars(123) == 123
        assert substitute_env_vars(None) is None


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_find_config_dir(self, tmp_path: Path, temp_config_dir: Path) -> None:
        """Test finding .reposcope/config.yaml."""
        config_file = temp_config_dir / "config.yaml"
        config_file.write_text("github:\n  max_files: 10\n")

        assert find_config_file(tmp_path) == config_file

    def test_find_root_config(self, tmp_path: Path) -> None:
        """Test finding reposcope.yaml in the project root."""
        config_file = tmp_path / "reposcope.yaml"
        config_file.write_text("{}")

        assert find_config_file(tmp_path) == config_file

    def test_config_dir_takes_priority(self, tmp_path: Path, temp_config_dir: Path) -> None:
        (tmp_path / "reposcope.yaml").write_text("{}")
        config_file = temp_config_dir / "config.yaml"
        config_file.write_text("{}")

        assert find_config_file(tmp_path) == config_file

    def test_not_found(self, tmp_path: Path) -> None:
        assert find_config_file(tmp_path) is None


class TestLoadConfigFromDict:
    """Tests for building a configuration from a dictionary."""

    def test_defaults(self) -> None:
        config = load_config_from_dict({})

        assert config.llm.primary["provider"] == "ollama"
        assert config.llm.fallback is None
        assert config.llm.max_retries == 2
        assert config.llm.max_prompt_chars == 100_000
        assert config.github.max_content_bytes == 10000

    def test_full_config(self, full_config: dict[str, Any]) -> None:
        config = load_config_from_dict(full_config)

        assert config.llm.primary["provider"] == "claude"
        assert config.llm.fallback is not None
        assert config.llm.fallback["provider"] == "ollama"
        assert config.llm.max_retries == 3
        assert config.llm.retry_backoff_seconds == 0.5
        assert config.llm.max_prompt_chars == 50000
        assert config.github.token == "ghp_test"
        assert config.github.max_files == 200
        assert config.github.concurrency == 4

    def test_env_substitution_in_slots(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")

        config = load_config_from_dict(
            {"llm": {"primary": {"provider": "gemini", "model": "g", "api_key": "${GEMINI_API_KEY}"}}}
        )

        assert config.llm.primary["api_key"] == "from-env"

    def test_slots_are_not_validated_on_load(self) -> None:
        """A bad provider slot is reported when the client is built, not here."""
        config = load_config_from_dict({"llm": {"primary": {"provider": "unknown", "model": "m"}}})

        assert config.llm.primary["provider"] == "unknown"

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_retries"):
            load_config_from_dict({"llm": {"max_retries": -1}})

    def test_non_positive_github_limit_rejected(self) -> None:
        with pytest.raises(ValueError, match="github.max_files must be positive"):
            load_config_from_dict({"github": {"max_files": 0}})

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValueError, match="github.timeout"):
            GitHubSettings(timeout=0)


class TestLoadConfig:
    """Tests for loading configuration files."""

    def test_explicit_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_explicit_path(self, tmp_path: Path, full_config: dict[str, Any]) -> None:
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(yaml.safe_dump(full_config))

        config = load_config(config_file)

        assert config.config_path == config_file
        assert config.github.timeout == 10

    def test_auto_discovery(
        self, tmp_path: Path, temp_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (temp_config_dir / "config.yaml").write_text("llm:\n  max_retries: 0\n")
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.llm.max_retries == 0
        assert config.config_path is not None

    def test_no_file_gives_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        config = load_config()

        assert config.config_path is None
        assert config == RepoScopeConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert load_config(config_file).llm.max_retries == 2


class TestCreateDefaultConfig:
    """Tests for the generated default configuration."""

    def test_default_config_loads(self) -> None:
        data = yaml.safe_load(create_default_config())

        config = load_config_from_dict(data)

        assert config.llm.primary["model"] == "llama3.2"
        assert config.llm.fallback is None
        assert config.github.api_base == "https://api.github.com"
        assert config.github.timeout == 30
