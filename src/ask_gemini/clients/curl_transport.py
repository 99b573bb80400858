import asyncio
import codecs
import logging
from typing import AsyncIterator

from ..errors import TransportStartError
from ..models.outcome import Exit, StderrChunk, StdoutChunk, TransportOutcome
from .base import Transport

logger = logging.getLogger(__name__)

READ_SIZE = 4096
_EOF = object()


class CurlTransport(Transport):
    """Runs one ``curl`` helper process per request.

    The body is written to curl's stdin (``--data-binary @-``) so it never
    passes through a shell or the argument list.
    """

    name = "curl"

    def __init__(self, curl_path: str = "curl"):
        self.curl_path = curl_path
        self._process: asyncio.subprocess.Process | None = None

    def command(self, url: str) -> list[str]:
        return [
            self.curl_path, "-s", "-S", "-X", "POST",
            "-H", "Content-Type: application/json",
            "--data-binary", "@-",
            url,
        ]

    async def run(self, url: str, body: bytes) -> AsyncIterator[TransportOutcome]:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command(url),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug(f"Could not start {self.curl_path}: {e}")
            raise TransportStartError(f"{self.curl_path}: {e.strerror or e}") from e

        self._process = process
        logger.debug(f"Started {self.curl_path} (pid {process.pid})")

        queue: asyncio.Queue = asyncio.Queue()
        readers = [
            asyncio.create_task(self._pump(process.stdout, StdoutChunk, queue)),
            asyncio.create_task(self._pump(process.stderr, StderrChunk, queue)),
        ]
        writer = asyncio.create_task(self._feed(process, body))
        try:
            open_streams = len(readers)
            while open_streams:
                item = await queue.get()
                if item is _EOF:
                    open_streams -= 1
                    continue
                yield item
            await writer
            code = await process.wait()
            logger.debug(f"{self.curl_path} exited with code {code}")
            yield Exit(code)
        finally:
            for task in (*readers, writer):
                if not task.done():
                    task.cancel()
            await self.aclose()
            self._process = None

    @staticmethod
    async def _feed(process: asyncio.subprocess.Process, body: bytes) -> None:
        try:
            process.stdin.write(body)
            await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # curl gave up before reading the body; its exit code says why
            logger.debug("curl closed stdin before the body was written")
        finally:
            process.stdin.close()

    @staticmethod
    async def _pump(stream: asyncio.StreamReader, kind, queue: asyncio.Queue) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                data = await stream.read(READ_SIZE)
                if not data:
                    tail = decoder.decode(b"", final=True)
                    if tail:
                        await queue.put(kind(tail))
                    break
                text = decoder.decode(data)
                if text:
                    await queue.put(kind(text))
        finally:
            await queue.put(_EOF)

    async def aclose(self) -> None:
        process = self._process
        if process is not None and process.returncode is None:
            logger.debug(f"Killing {self.curl_path} (pid {process.pid})")
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
