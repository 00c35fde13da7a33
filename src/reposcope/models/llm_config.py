"""LLM provider slot and structured client settings.

A slot names one provider/model pair. Providers differ only in their LiteLLM
prefix and which credential they need, so those rules live in one table:

| provider | LiteLLM prefix | needs        |
|----------|----------------|--------------|
| claude   | anthropic/     | api_key      |
| gemini   | gemini/        | api_key      |
| ollama   | ollama/        | api_base     |
| bedrock  | bedrock/       | AWS env vars |
"""

from dataclasses import asdict, dataclass, field
from typing import Any, NamedTuple


class ProviderRule(NamedTuple):
    litellm_prefix: str
    required: str | None


PROVIDER_RULES: dict[str, ProviderRule] = {
    "claude": ProviderRule("anthropic", "api_key"),
    "gemini": ProviderRule("gemini", "api_key"),
    "ollama": ProviderRule("ollama", "api_base"),
    "bedrock": ProviderRule("bedrock", None),
}

VALID_PROVIDERS = frozenset(PROVIDER_RULES)

DEFAULT_MAX_TOKENS = 8192
# Below this a full architecture or risk JSON object is likely to be cut off
MIN_SAFE_MAX_TOKENS = 2000

DEFAULT_MAX_PROMPT_CHARS = 100_000
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_BACKOFF_SECONDS = 1.0


@dataclass
class LLMConfig:
    """One provider slot (primary or fallback).

    Attributes:
        provider: One of VALID_PROVIDERS, case-insensitive
        model: Provider-side model identifier
        api_key: Required for claude and gemini
        api_base: Required for ollama
        temperature: Fixed at 0; structured decoding assumes repeatable output
        max_tokens: Response token ceiling
        enabled: Disabled slots are skipped when the client is built
    """

    provider: str
    model: str
    api_key: str | None = None
    api_base: str | None = None
    temperature: float = 0.0
    max_tokens: int = DEFAULT_MAX_TOKENS
    enabled: bool = True

    def __post_init__(self) -> None:
        self.provider = self.provider.lower().strip()
        self.model = self.model.strip()

        rule = PROVIDER_RULES.get(self.provider)
        if rule is None:
            raise ValueError(
                f"Invalid provider '{self.provider}'. Must be one of: {sorted(VALID_PROVIDERS)}"
            )
        if not self.model:
            raise ValueError("Model identifier cannot be empty")
        if self.temperature != 0.0:
            raise ValueError(
                f"Temperature must be 0 for reproducible structured output. Got: {self.temperature}"
            )
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive. Got: {self.max_tokens}")
        if rule.required and not getattr(self, rule.required):
            raise ValueError(f"{rule.required} is required for {self.provider} provider")

    def validate(self) -> list[str]:
        """Return non-fatal problems with this slot."""
        warnings: list[str] = []
        if self.max_tokens < MIN_SAFE_MAX_TOKENS:
            warnings.append(
                f"max_tokens is set to {self.max_tokens}, which may truncate JSON responses"
            )
        if self.api_base and not self.api_base.startswith(("http://", "https://")):
            warnings.append(f"api_base '{self.api_base}' does not start with http:// or https://")
        return warnings

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the API key masked."""
        data = asdict(self)
        data["api_key"] = "***" if self.api_key else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LLMConfig":
        """Build a slot from a raw config mapping, coercing scalar types."""
        return cls(
            provider=str(data.get("provider", "")),
            model=str(data.get("model", "")),
            api_key=data.get("api_key") or None,
            api_base=data.get("api_base") or None,
            temperature=float(data.get("temperature", 0.0)),
            max_tokens=int(data.get("max_tokens", DEFAULT_MAX_TOKENS)),
            enabled=bool(data.get("enabled", True)),
        )

    def get_litellm_model_name(self) -> str:
        """Model name with the provider prefix LiteLLM routes on."""
        return f"{PROVIDER_RULES[self.provider].litellm_prefix}/{self.model}"


def _default_primary() -> dict[str, Any]:
    return {"provider": "ollama", "model": "llama3.2", "api_base": "http://localhost:11434"}


@dataclass
class LLMSettings:
    """Settings for the structured completion client.

    Slots are kept as raw mappings and only validated when the client is
    built, so a broken fallback does not stop the config from loading. The
    fallback is used when the primary slot cannot be initialized; it is not
    a per-call retry target.

    Attributes:
        primary: Raw primary slot settings
        fallback: Raw fallback slot settings, if any
        max_retries: Retries after the first attempt on provider errors
        retry_backoff_seconds: Base delay; retry N waits base * N seconds
        max_prompt_chars: Longer prompts are rejected before any call
    """

    primary: dict[str, Any] = field(default_factory=_default_primary)
    fallback: dict[str, Any] | None = None
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS
    max_prompt_chars: int = DEFAULT_MAX_PROMPT_CHARS

    def __post_init__(self) -> None:
        for name in ("max_retries", "retry_backoff_seconds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative. Got: {getattr(self, name)}")
        if self.max_prompt_chars <= 0:
            raise ValueError(f"max_prompt_chars must be positive. Got: {self.max_prompt_chars}")
