"""LLM clients built on LiteLLM.

- LLMClient: one provider slot, one async completion call per invocation
- StructuredLLMClient: prompt + schema description in, parsed JSON out, with
  retries, a size ceiling and primary/fallback provider slots

Temperature is fixed at 0 so identical prompts give reproducible answers.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

import litellm

from reposcope.llm.errors import (
    PromptTooLargeError,
    ProviderError,
    ResponseParseError,
)
from reposcope.llm.json_repair import parse_llm_json
from reposcope.models.llm_config import (
    DEFAULT_MAX_PROMPT_CHARS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    LLMConfig,
    LLMSettings,
)

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 200

JSON_INSTRUCTION = (
    "Please respond with valid JSON that matches this schema: {schema}. "
    "Do not wrap the JSON in markdown code blocks."
)


@dataclass
class LLMResponse:
    """Response from LLM completion.

    Attributes:
        content: Generated text content
        model: Model that generated the response
        usage: Token usage statistics
        finish_reason: Reason for completion (stop, length, etc.)
    """

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    finish_reason: str | None = None


class LLMProvider(Protocol):
    """Anything that can answer a single completion request."""

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse: ...


class LLMClient:
    """Single-provider LLM client using LiteLLM.

    Supports multiple providers through a single interface:
    - Claude (Anthropic)
    - Gemini (Google)
    - Ollama (local)
    - Bedrock (AWS)

    Stateless per call, so one instance can serve concurrent runs.
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize LLM client with configuration.

        Args:
            config: LLM configuration with provider, model, and credentials
        """
        self.config = config

    @property
    def name(self) -> str:
        return f"{self.config.provider}/{self.config.model}"

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion from the LLM.

        Args:
            prompt: User prompt for the LLM
            system_prompt: Optional system prompt
            max_tokens: Override max_tokens from config

        Returns:
            LLMResponse with generated content

        Raises:
            ProviderError: If the completion fails
        """
        messages: list[dict[str, str]] = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        completion_kwargs: dict[str, Any] = {
            "model": self.config.get_litellm_model_name(),
            "messages": messages,
            "temperature": 0,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
        if self.config.api_key:
            completion_kwargs["api_key"] = self.config.api_key

        # Provider-specific parameters
        if self.config.provider == "ollama":
            completion_kwargs["api_base"] = self.config.api_base
            completion_kwargs["top_k"] = 1
        elif self.config.provider in {"claude", "gemini"}:
            completion_kwargs["top_k"] = 1

        try:
            response = await litellm.acompletion(**completion_kwargs)
        except litellm.exceptions.AuthenticationError as e:
            raise ProviderError(f"Authentication failed for {self.config.provider}: {e}") from e
        except litellm.exceptions.RateLimitError as e:
            raise ProviderError(f"Rate limit exceeded for {self.config.provider}: {e}") from e
        except litellm.exceptions.APIConnectionError as e:
            raise ProviderError(f"Connection failed to {self.config.provider}: {e}") from e
        except Exception as e:
            raise ProviderError(f"LLM completion failed: {e}") from e

        choice = response.choices[0]
        content = choice.message.content or ""

        usage: dict[str, int] = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        return LLMResponse(
            content=content,
            model=response.model or self.config.model,
            usage=usage,
            finish_reason=choice.finish_reason,
        )


def create_client(config: LLMConfig) -> LLMClient:
    """Create an LLM client from configuration.

    Args:
        config: LLM configuration

    Returns:
        Configured LLMClient instance

    Raises:
        ValueError: If the slot is disabled in config
    """
    if not config.enabled:
        raise ValueError(f"LLM provider {config.provider} is disabled in configuration")

    return LLMClient(config)


class StructuredLLMClient:
    """Turns a prompt and a schema description into parsed JSON.

    One provider is used per attempt: the primary slot, or the fallback slot
    when the primary failed to initialize. Provider failures are retried with
    linear backoff. The returned value is any syntactically valid JSON; field
    validation is left to the caller's typed decoder.
    """

    def __init__(
        self,
        primary: LLMProvider | None,
        fallback: LLMProvider | None = None,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS,
        max_prompt_chars: int = DEFAULT_MAX_PROMPT_CHARS,
        init_errors: dict[str, str] | None = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.max_prompt_chars = max_prompt_chars
        self.init_errors = dict(init_errors or {})

    @property
    def provider(self) -> LLMProvider | None:
        """Provider used for every attempt."""
        return self.primary if self.primary is not None else self.fallback

    def is_available(self) -> bool:
        return self.provider is not None

    def available_slots(self) -> list[str]:
        """Names of the slots that initialized."""
        slots = []
        if self.primary is not None:
            slots.append("primary")
        if self.fallback is not None:
            slots.append("fallback")
        return slots

    async def generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        """Send one prompt, retrying provider failures.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt

        Returns:
            Raw response text

        Raises:
            ProviderError: If no provider is available or all attempts failed
        """
        provider = self.provider
        if provider is None:
            raise ProviderError("No LLM provider available")

        if self.primary is None:
            logger.info("Primary LLM provider unavailable, using fallback")

        logger.debug(
            "Generating text with LLM (prompt %d chars, system prompt %d chars)",
            len(prompt),
            len(system_prompt or ""),
        )

        attempts = self.max_retries + 1
        last_error: ProviderError | None = None

        for attempt in range(attempts):
            try:
                response = await provider.complete(prompt, system_prompt=system_prompt)
                return response.content
            except ProviderError as e:
                last_error = e
                logger.warning("LLM generation attempt %d/%d failed: %s", attempt + 1, attempts, e)
                if attempt < self.max_retries:
                    await asyncio.sleep(self.retry_backoff_seconds * (attempt + 1))

        raise ProviderError(
            f"LLM generation failed after {attempts} attempts: {last_error}. "
            "This might be due to rate limits, content filtering, or service issues."
        ) from last_error

    async def generate_structured_response(
        self,
        prompt: str,
        schema_description: str,
        system_instruction: str | None = None,
    ) -> Any:
        """Ask for JSON matching ``schema_description`` and parse the answer.

        Args:
            prompt: User prompt
            schema_description: Human-readable description of the expected JSON
            system_instruction: Role instruction prepended to the JSON demand

        Returns:
            Parsed JSON value

        Raises:
            PromptTooLargeError: If the prompt exceeds the size ceiling
            ProviderError: If the provider could not be reached
            ResponseParseError: If the response is empty or holds no JSON
        """
        if len(prompt) > self.max_prompt_chars:
            logger.error(
                "Prompt length %d exceeds maximum %d", len(prompt), self.max_prompt_chars
            )
            raise PromptTooLargeError(len(prompt), self.max_prompt_chars)

        system_prompt = (
            f"{system_instruction or ''}\n\n{JSON_INSTRUCTION.format(schema=schema_description)}"
        )

        response = await self.generate_text(prompt, system_prompt)
        logger.debug("LLM response received (%d chars)", len(response))

        if not response or not response.strip():
            raise ResponseParseError(
                "LLM returned empty response. This might be due to content filtering, "
                "rate limits, or input being too large."
            )

        found, value = parse_llm_json(response)
        if not found:
            preview = response[:PREVIEW_CHARS]
            raise ResponseParseError(
                f"Failed to parse structured response: no valid JSON found in {preview!r}",
                preview=preview,
            )
        return value


def create_structured_client(settings: LLMSettings) -> StructuredLLMClient:
    """Build a structured client from settings.

    A slot whose configuration is invalid or disabled is left empty and its
    error is recorded in ``init_errors``; the run proceeds with whatever
    initialized.

    Args:
        settings: LLM settings with primary and optional fallback slots

    Returns:
        StructuredLLMClient (possibly with no provider at all)
    """
    slots: dict[str, LLMClient | None] = {"primary": None, "fallback": None}
    init_errors: dict[str, str] = {}

    for slot, raw in (("primary", settings.primary), ("fallback", settings.fallback)):
        if not raw:
            continue
        try:
            slots[slot] = create_client(LLMConfig.from_dict(raw))
            logger.debug("LLM %s provider initialized: %s", slot, slots[slot].name)
        except (ValueError, TypeError) as e:
            init_errors[slot] = str(e)
            logger.warning("LLM %s provider failed to initialize: %s", slot, e)

    return StructuredLLMClient(
        slots["primary"],
        slots["fallback"],
        max_retries=settings.max_retries,
        retry_backoff_seconds=settings.retry_backoff_seconds,
        max_prompt_chars=settings.max_prompt_chars,
        init_errors=init_errors,
    )
