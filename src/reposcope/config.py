"""RepoScope configuration system.

Configuration is YAML-based with a few CLI overrides (--config, --verbose,
--quiet, --ci). Supports environment variable substitution (${VAR}) in
config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.reposcope/config.yaml
3. ./reposcope.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from reposcope.analyzers.github import DEFAULT_API_BASE
from reposcope.models.llm_config import (
    DEFAULT_MAX_PROMPT_CHARS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    LLMSettings,
)

CONFIG_DIR = ".reposcope"
CONFIG_FILE = "config.yaml"
ROOT_CONFIG_FILE = "reposcope.yaml"

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class GitHubSettings:
    """GitHub content provider settings.

    Attributes:
        token: Personal access token (falls back to $GITHUB_TOKEN)
        api_base: REST API root
        max_files: Maximum entries listed from the repository tree
        max_content_files: Maximum files whose content is fetched
        max_content_bytes: Only files smaller than this are fetched
        timeout: HTTP timeout in seconds
        concurrency: Concurrent content requests
    """

    token: str | None = None
    api_base: str = DEFAULT_API_BASE
    max_files: int = 1000
    max_content_files: int = 3000
    max_content_bytes: int = 10000
    timeout: float = 30.0
    concurrency: int = 8

    def __post_init__(self) -> None:
        """Validate limits."""
        for name in ("max_files", "max_content_files", "max_content_bytes", "concurrency"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"github.{name} must be positive. Got: {value}")
        if self.timeout <= 0:
            raise ValueError(f"github.timeout must be positive. Got: {self.timeout}")


@dataclass
class RepoScopeConfig:
    """Top-level RepoScope configuration.

    Attributes:
        llm: Structured client settings (provider slots, retries, prompt ceiling)
        github: Content provider settings
    """

    llm: LLMSettings = field(default_factory=LLMSettings)
    github: GitHubSettings = field(default_factory=GitHubSettings)

    # Set by load_config
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_VAR = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax. Example: ${GEMINI_API_KEY} -> value of GEMINI_API_KEY

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.reposcope/config.yaml
    2. ./reposcope.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / CONFIG_DIR / CONFIG_FILE,
        start_path / ROOT_CONFIG_FILE,
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> RepoScopeConfig:
    """Load configuration from a dictionary.

    Provider slots are kept raw here and validated when the structured client
    is built, so one bad slot does not prevent the other from loading.

    Args:
        data: Configuration dictionary

    Returns:
        RepoScopeConfig instance

    Raises:
        ValueError: If a section has invalid values
    """
    data = substitute_env_vars(data)

    config = RepoScopeConfig()

    if "llm" in data:
        llm_data = data["llm"] or {}
        config.llm = LLMSettings(
            primary=llm_data.get("primary") or config.llm.primary,
            fallback=llm_data.get("fallback"),
            max_retries=llm_data.get("max_retries", DEFAULT_MAX_RETRIES),
            retry_backoff_seconds=llm_data.get(
                "retry_backoff_seconds", DEFAULT_RETRY_BACKOFF_SECONDS
            ),
            max_prompt_chars=llm_data.get("max_prompt_chars", DEFAULT_MAX_PROMPT_CHARS),
        )

    if "github" in data:
        github_data = data["github"] or {}
        defaults = GitHubSettings()
        config.github = GitHubSettings(
            token=github_data.get("token"),
            api_base=github_data.get("api_base", defaults.api_base),
            max_files=github_data.get("max_files", defaults.max_files),
            max_content_files=github_data.get("max_content_files", defaults.max_content_files),
            max_content_bytes=github_data.get("max_content_bytes", defaults.max_content_bytes),
            timeout=github_data.get("timeout", defaults.timeout),
            concurrency=github_data.get("concurrency", defaults.concurrency),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> RepoScopeConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        RepoScopeConfig instance (defaults when no file is found)

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = RepoScopeConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# RepoScope Configuration

# LLM settings
# The fallback slot is only used when the primary slot cannot be initialized
llm:
  primary:
    provider: "ollama"     # ollama (local), claude, gemini, bedrock
    model: "llama3.2"
    api_base: "http://localhost:11434"  # Ollama server URL
    temperature: 0         # MUST be 0 for reproducibility
    max_tokens: 8192
  # fallback:
  #   provider: "gemini"
  #   model: "gemini-2.0-flash"
  #   api_key: "${GEMINI_API_KEY}"
  max_retries: 2           # retries after the first attempt
  retry_backoff_seconds: 1.0
  max_prompt_chars: 100000

# GitHub content provider
github:
  # token: "${GITHUB_TOKEN}"  # defaults to the GITHUB_TOKEN environment variable
  api_base: "https://api.github.com"
  max_files: 1000           # entries listed from the repository tree
  max_content_files: 3000   # files whose content is fetched
  max_content_bytes: 10000  # only smaller files are fetched
  timeout: 30
  concurrency: 8
'''
