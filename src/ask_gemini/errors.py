"""Exceptions raised at the seams of the ask pipeline.

None of these reach the host: ``AskGemini`` turns each into rendered text.
"""


class AskGeminiError(Exception):
    """Base class for ask_gemini errors."""

    def render_text(self) -> str:
        return f"Error: {self}"


class ConfigError(AskGeminiError):
    """No API key is configured. Raised before any network activity."""

    def __init__(self, message: str = "GEMINI_API_KEY is not set. Please set the environment variable or pass it in setup."):
        super().__init__(message)

    def render_text(self) -> str:
        return str(self)


class EncodingError(AskGeminiError):
    """The question could not be serialized into a request body."""

    def render_text(self) -> str:
        return f"Error encoding JSON request: {self}"


class EmptyInputError(AskGeminiError):
    """The question or selection was empty."""


class TransportStartError(AskGeminiError):
    """The transport could not even be started (e.g. curl is missing)."""
