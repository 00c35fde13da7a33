"""LLM integration module for RepoScope.

Provides the structured completion client built on LiteLLM for multi-provider
support (Claude, Gemini, Ollama and Bedrock), JSON extraction with truncation
repair, and the stage prompts.

Temperature is fixed at 0 for reproducible outputs.
"""

from reposcope.llm.client import (
    LLMClient,
    LLMProvider,
    LLMResponse,
    StructuredLLMClient,
    create_client,
    create_structured_client,
)
from reposcope.llm.errors import (
    LLMError,
    PromptTooLargeError,
    ProviderError,
    ResponseParseError,
)
from reposcope.llm.json_repair import extract_json, parse_llm_json, repair_truncated_json
from reposcope.llm.prompts import SYSTEM_PROMPTS, StagePrompt, get_system_prompt
from reposcope.models.llm_config import VALID_PROVIDERS, LLMConfig, LLMSettings

__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "LLMResponse",
    "LLMSettings",
    "PromptTooLargeError",
    "ProviderError",
    "ResponseParseError",
    "SYSTEM_PROMPTS",
    "StagePrompt",
    "StructuredLLMClient",
    "VALID_PROVIDERS",
    "create_client",
    "create_structured_client",
    "extract_json",
    "get_system_prompt",
    "parse_llm_json",
    "repair_truncated_json",
]
