import asyncio
import json
from dataclasses import dataclass, field

import pytest

from ask_gemini.clients.base import Transport
from ask_gemini.display import SurfaceHandle
from ask_gemini.errors import TransportStartError
from ask_gemini.models.gemini import GeminiConfig

ANSWER_BODY = json.dumps({"candidates": [{"content": {"parts": [{"text": "hello"}]}}]})
ERROR_BODY = json.dumps({"error": {"message": "quota exceeded"}})


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's own Gemini settings out of the tests."""
    for key in ("GEMINI_API_KEY", "ASK_GEMINI_API_KEY", "ASK_GEMINI_MODEL", "ASK_GEMINI_DEFAULT_PROMPT",
                "ASK_GEMINI_TRANSPORT", "ASK_GEMINI_TIMEOUT_SECONDS", "ASK_GEMINI_COMMANDS_CONFIG_PATH"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def gemini_config():
    return GeminiConfig(model="gemini-1.5-flash-latest", default_prompt="Explain the following code:", api_key="test-key")


@dataclass
class RecordingSurface:
    """Keeps every render in memory."""

    renders: list = field(default_factory=list)
    created: int = 0
    destroyed: int = 0

    def create(self):
        self.created += 1
        return SurfaceHandle()

    def render(self, handle, text):
        handle.rendered = text
        self.renders.append(text)

    def destroy(self, handle):
        handle.closed = True
        self.destroyed += 1


@pytest.fixture
def surface():
    return RecordingSurface()


class ScriptedTransport(Transport):
    """Replays a fixed list of outcomes, optionally hanging or failing."""

    name = "scripted"

    def __init__(self, outcomes=(), hang=False, fail_with=None):
        self.outcomes = list(outcomes)
        self.hang = hang
        self.fail_with = fail_with
        self.calls = []
        self.closed = False

    async def run(self, url, body):
        self.calls.append((url, body))
        if isinstance(self.fail_with, TransportStartError):
            raise self.fail_with
        for outcome in self.outcomes:
            await asyncio.sleep(0)
            yield outcome
        if self.fail_with is not None:
            raise self.fail_with
        if self.hang:
            await asyncio.sleep(3600)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def scripted():
    """Factory for scripted transports: ``scripted([StdoutChunk(...), Exit(0)])``."""
    return ScriptedTransport
