"""Turns the outcomes of one Gemini call into exactly one response.

The resolver starts pending and latches on the first authoritative result;
later outcomes never replace it. Precedence, highest first:

1. stdout decoded as a Gemini document (answer, API error, or unexpected shape)
2. stdout present but not decodable
3. stderr text
4. non-zero exit code (or a timeout)
5. clean exit with no output at all

stdout chunks are coalesced and decoded as soon as the buffer parses, so an
answer can latch before the process exits. stderr is only advisory and is
held until the exit, since curl can write diagnostics even on success.
"""

import dataclasses
import json
import logging
from typing import Any, Iterable

from .models.outcome import (
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

logger = logging.getLogger(__name__)

UNKNOWN_API_ERROR = "Unknown API error"
_UNDECODABLE = object()


def _try_decode(raw_body: str) -> Any:
    try:
        return json.loads(raw_body)
    except json.JSONDecodeError:
        return _UNDECODABLE


def extract_answer(document: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` or None."""
    try:
        text = document["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


def extract_error_message(document: Any) -> str | None:
    """Return ``error.message``, or a placeholder for a bare error object."""
    if not isinstance(document, dict):
        return None
    error = document.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if isinstance(message, str) and message:
        return message
    return UNKNOWN_API_ERROR


def classify_document(document: Any, raw_body: str) -> ResolvedResponse:
    """Map a decoded response document onto a resolution."""
    text = extract_answer(document)
    if text is not None:
        return Answer(text)
    message = extract_error_message(document)
    if message is not None:
        return ApiError(message, raw_body)
    return MalformedResponse(raw_body, decoded=True)


class ResponseResolver:
    """State machine for a single request. Not reusable across requests."""

    def __init__(self):
        self._stdout: list[str] = []
        self._stderr: list[str] = []
        self._resolution: ResolvedResponse | None = None
        self._exit_code: int | None = None

    @property
    def resolved(self) -> bool:
        return self._resolution is not None

    @property
    def resolution(self) -> ResolvedResponse | None:
        return self._resolution

    @property
    def finished(self) -> bool:
        """True once the transport reported its exit (or timed out)."""
        return self._exit_code is not None

    @property
    def stdout_text(self) -> str:
        return "".join(self._stdout)

    @property
    def stderr_text(self) -> str:
        return "".join(self._stderr)

    def _latch(self, resolution: ResolvedResponse) -> bool:
        if self._resolution is not None:
            logger.debug(f"Ignoring {type(resolution).__name__}; already resolved to {type(self._resolution).__name__}")
            return False
        logger.debug(f"Resolved to {type(resolution).__name__}")
        self._resolution = resolution
        return True

    def _annotate(self, note: str) -> None:
        self._resolution = dataclasses.replace(
            self._resolution, notes=self._resolution.notes + (note,)
        )

    def feed(self, outcome: TransportOutcome) -> ResolvedResponse | None:
        """Apply one outcome and return the resolution so far."""
        if isinstance(outcome, StdoutChunk):
            self._on_stdout(outcome.text)
        elif isinstance(outcome, StderrChunk):
            self._on_stderr(outcome.text)
        elif isinstance(outcome, Exit):
            self._on_exit(outcome.code)
        else:
            raise TypeError(f"Unknown transport outcome: {outcome!r}")
        return self._resolution

    def feed_all(self, outcomes: Iterable[TransportOutcome]) -> ResolvedResponse:
        """Apply a complete outcome sequence (ending in ``Exit``)."""
        for outcome in outcomes:
            self.feed(outcome)
        return self.result()

    def _on_stdout(self, text: str) -> None:
        if self.resolved:
            return
        self._stdout.append(text)
        raw_body = self.stdout_text
        if not raw_body.strip():
            return
        document = _try_decode(raw_body)
        # A bare scalar may still be a prefix of a longer body
        if isinstance(document, (dict, list)):
            self._latch(classify_document(document, raw_body))

    def _on_stderr(self, text: str) -> None:
        if self.resolved:
            logger.debug("Ignoring stderr after resolution")
            return
        self._stderr.append(text)

    def _on_exit(self, code: int) -> None:
        if self._exit_code is not None:
            logger.warning(f"Ignoring duplicate exit code {code}")
            return
        self._exit_code = code

        if self.resolved:
            return

        raw_body = self.stdout_text
        stderr = self.stderr_text.strip()
        if raw_body:
            document = _try_decode(raw_body)
            if document is _UNDECODABLE:
                self._latch(MalformedResponse(raw_body))
            else:
                self._latch(classify_document(document, raw_body))
        elif stderr:
            self._latch(TransportError(stderr))
            if code != 0:
                self._annotate(f"API call process exited with code: {code}")
        elif code != 0:
            self._latch(ProcessFailure(code))
        else:
            self._latch(MalformedResponse(""))

    def transport_failed(self, reason: str, started: bool = True) -> ResolvedResponse:
        """The transport could not start or broke down before its exit."""
        if self._exit_code is None:
            self._exit_code = -1
        self._latch(TransportError(reason, started=started))
        return self._resolution

    def timeout(self, seconds: float) -> ResolvedResponse:
        """No exit arrived in time. Only takes effect if nothing latched yet."""
        if self._exit_code is None:
            self._exit_code = -1
        self._latch(ProcessFailure(-1, timeout_seconds=seconds))
        return self._resolution

    def result(self) -> ResolvedResponse:
        """The final resolution. Only valid once the transport finished."""
        if self._resolution is None:
            raise RuntimeError("Response is not resolved yet")
        return self._resolution
