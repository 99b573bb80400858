from .gemini import AskRequest, GeminiConfig, PromptCommand
from .outcome import (
    Answer,
    ApiError,
    Exit,
    MalformedResponse,
    ProcessFailure,
    ResolvedResponse,
    StderrChunk,
    StdoutChunk,
    TransportError,
    TransportOutcome,
)

__all__ = [
    "AskRequest",
    "GeminiConfig",
    "PromptCommand",
    "Answer",
    "ApiError",
    "Exit",
    "MalformedResponse",
    "ProcessFailure",
    "ResolvedResponse",
    "StderrChunk",
    "StdoutChunk",
    "TransportError",
    "TransportOutcome",
]
