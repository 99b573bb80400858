"""Transport outcomes and the resolved responses they collapse into.

A transport produces a stream of ``TransportOutcome`` values: any interleaving
of ``StdoutChunk`` and ``StderrChunk`` followed by exactly one ``Exit``. The
resolver turns that stream into exactly one ``ResolvedResponse``.
"""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class StdoutChunk:
    text: str


@dataclass(frozen=True)
class StderrChunk:
    text: str


@dataclass(frozen=True)
class Exit:
    code: int


TransportOutcome = Union[StdoutChunk, StderrChunk, Exit]


@dataclass(frozen=True)
class Answer:
    text: str
    notes: tuple[str, ...] = field(default=(), compare=False)

    def render_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class ApiError:
    message: str
    raw_body: str
    notes: tuple[str, ...] = field(default=(), compare=False)

    def render_text(self) -> str:
        return f"API Error: {self.message}\n\nRaw Response:\n{self.raw_body}"


@dataclass(frozen=True)
class MalformedResponse:
    raw_body: str
    decoded: bool = False  # JSON parsed but neither expected shape matched
    notes: tuple[str, ...] = field(default=(), compare=False)

    def render_text(self) -> str:
        if self.decoded:
            headline = "Error: Could not extract text from Gemini response."
        else:
            headline = "Error: Received non-JSON or malformed response from API."
        return f"{headline}\n\nRaw Response:\n{self.raw_body}"


@dataclass(frozen=True)
class TransportError:
    raw_stderr: str
    started: bool = True
    notes: tuple[str, ...] = field(default=(), compare=False)

    def render_text(self) -> str:
        if not self.started:
            return f"Error: could not start transport: {self.raw_stderr}"
        return f"Error during API call (stderr):\n{self.raw_stderr}"


@dataclass(frozen=True)
class ProcessFailure:
    exit_code: int
    timeout_seconds: float | None = None
    notes: tuple[str, ...] = field(default=(), compare=False)

    @property
    def timed_out(self) -> bool:
        return self.timeout_seconds is not None

    def render_text(self) -> str:
        if self.timed_out:
            return f"API call timed out after {self.timeout_seconds:g} seconds"
        return f"API call process exited with code: {self.exit_code}"


ResolvedResponse = Union[Answer, ApiError, MalformedResponse, TransportError, ProcessFailure]


def render_resolution(resolution: ResolvedResponse) -> str:
    """Full display text for a resolution, trailing notes included."""
    text = resolution.render_text()
    for note in resolution.notes:
        text += f"\n\n{note}"
    return text
