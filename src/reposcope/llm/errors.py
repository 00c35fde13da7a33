"""Exceptions raised by the structured completion client."""


class LLMError(Exception):
    """Exception raised for LLM-related errors."""

    pass


class PromptTooLargeError(LLMError):
    """Prompt exceeds the configured size ceiling.

    Raised before any provider call is made and never retried.
    """

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            f"Prompt is too large ({length} characters, limit {limit}). "
            "Try with a smaller repository or reduce the analysis scope."
        )


class ProviderError(LLMError):
    """The LLM provider call failed (network, rate limit, auth, content filter)."""

    pass


class ResponseParseError(LLMError):
    """The provider replied but no JSON could be recovered from the text."""

    def __init__(self, message: str, preview: str = "") -> None:
        self.preview = preview
        super().__init__(message)
