import asyncio
import json
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from rich.console import Console
from rich.json import JSON
from rich.rule import Rule

from .clients import TRANSPORTS, CurlTransport, HttpxTransport, Transport
from .display import DisplaySurface, RichSurface
from .errors import AskGeminiError, ConfigError, EmptyInputError, EncodingError, TransportStartError
from .models.gemini import GeminiConfig, PromptCommand
from .models.outcome import ResolvedResponse, render_resolution
from .request_builder import build_request, redacted_url, shell_command
from .resolver import ResponseResolver

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class AskResult:
    """What one ask produced: the rendered text and how it got there."""

    text: str | None
    resolution: ResolvedResponse | None = None
    error: AskGeminiError | None = None

    @property
    def ok(self) -> bool:
        return self.resolution is not None and self.error is None


def create_transport_factory(name: str = "curl", curl_path: str = "curl", timeout_seconds: float | None = None) -> Callable[[], Transport]:
    """Factory producing a fresh transport per request."""
    key = (name or "curl").strip().lower()
    if key not in TRANSPORTS:
        raise ValueError(f"Unsupported transport '{name}'. Choose one of: {', '.join(sorted(TRANSPORTS))}")
    if key == CurlTransport.name:
        return lambda: CurlTransport(curl_path=curl_path)
    return lambda: HttpxTransport(timeout=timeout_seconds or None)


class AskGemini:
    """Sends a question to Gemini and shows exactly one result on a surface.

    Every ask gets its own transport, resolver and surface handle, so one
    instance can serve any number of sequential or concurrent asks.
    """

    def __init__(
        self,
        config: GeminiConfig,
        surface: DisplaySurface | None = None,
        transport_factory: Callable[[], Transport] | None = None,
        timeout_seconds: float | None = None,
        verbose: bool = False,
        curl_path: str = "curl",
    ):
        self.config = config
        self.surface = surface or RichSurface()
        self.transport_factory = transport_factory or create_transport_factory("curl", curl_path=curl_path)
        self.timeout_seconds = timeout_seconds or None
        self.verbose = verbose
        self.curl_path = curl_path

    async def ask_async(self, question: str) -> AskResult:
        """Run the whole pipeline for one question."""
        if not question or not question.strip():
            logger.warning("Empty question; nothing to ask.")
            return AskResult(text=None, error=EmptyInputError("Question is empty"))

        handle = self.surface.create()
        try:
            result = await self._resolve(question)
            self.surface.render(handle, result.text)
            return result
        finally:
            self.surface.destroy(handle)

    async def ask_about_selection_async(self, command: PromptCommand, selected_text: str) -> AskResult:
        """Apply a command's prompt to the selected text and ask."""
        if selected_text == "":
            logger.warning("No text selected.")
            return AskResult(text=None, error=EmptyInputError("No text selected."))
        return await self.ask_async(command.build_question(selected_text))

    def ask(self, question: str) -> AskResult:
        return asyncio.run(self.ask_async(question))

    def ask_about_selection(self, command: PromptCommand, selected_text: str) -> AskResult:
        return asyncio.run(self.ask_about_selection_async(command, selected_text))

    async def _resolve(self, question: str) -> AskResult:
        try:
            url, body = build_request(question, self.config)
        except ConfigError as e:
            logger.debug(f"Not sending request: {e}")
            return AskResult(text=e.render_text(), error=e)
        except EncodingError as e:
            logger.debug(f"Could not encode request: {e}")
            return AskResult(text=e.render_text(), error=e)

        if self.verbose:
            self._print_request(body)
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Gemini Request Payload: {body.decode('utf-8')}")

        resolver = ResponseResolver()
        transport = self.transport_factory()
        try:
            await self._drive(transport, transport.run(url, body), resolver)
        except TransportStartError as e:
            resolver.transport_failed(str(e), started=False)
        except Exception as e:
            logger.exception(f"Unexpected error during Gemini request: {e}")
            resolver.transport_failed(f"{type(e).__name__}: {e}")

        resolution = resolver.result()
        return AskResult(text=render_resolution(resolution), resolution=resolution)

    async def _drive(self, transport: Transport, outcomes: AsyncIterator, resolver: ResponseResolver) -> None:
        """Feed outcomes to the resolver until the transport exits or time runs out."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds if self.timeout_seconds else None
        iterator = outcomes.__aiter__()
        try:
            while not resolver.finished:
                remaining = None if deadline is None else max(deadline - loop.time(), 0)
                try:
                    outcome = await asyncio.wait_for(iterator.__anext__(), remaining)
                except StopAsyncIteration:
                    break
                resolver.feed(outcome)
        except asyncio.TimeoutError:
            logger.warning(f"No response from Gemini after {self.timeout_seconds:g} seconds")
            resolver.timeout(self.timeout_seconds)
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()
            await transport.aclose()

        if not resolver.finished:
            logger.warning("Transport finished without reporting an exit code")
            resolver.transport_failed("transport ended without an exit status")

    def _print_request(self, body: bytes) -> None:
        console.print(Rule("Querying Gemini API", style="blue"))
        console.print(f"[dim]Model:[/dim] [italic]{self.config.model}[/italic]  [dim]URL:[/dim] {redacted_url(self.config)}")
        console.print(Rule("Request Payload", style="dim blue"))
        try:
            console.print(JSON(body.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Could not print payload: {e}")
        console.print(Rule("Equivalent command", style="dim blue"))
        console.print(shell_command(redacted_url(self.config), body, self.curl_path), markup=False, highlight=False)
        console.print(Rule(style="blue"))
