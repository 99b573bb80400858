import logging
from typing import AsyncIterator

import httpx

from ..models.outcome import Exit, StderrChunk, StdoutChunk, TransportOutcome
from .base import Transport

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """Single in-process POST with ``httpx.AsyncClient``.

    The response maps onto the same outcomes a curl process produces: the
    body arrives as stdout chunks and any HTTP status ends with ``Exit(0)``,
    since Gemini puts its error envelope in the body. A failure to complete
    the exchange becomes stderr text followed by ``Exit(1)``.
    """

    name = "httpx"

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float | None = None):
        self._client = client
        self._timeout = timeout

    async def run(self, url: str, body: bytes) -> AsyncIterator[TransportOutcome]:
        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(timeout=self._timeout)
        try:
            async with client.stream(
                "POST",
                url,
                content=body,
                headers={"Content-Type": "application/json"},
            ) as response:
                logger.debug(f"Gemini responded with HTTP {response.status_code}")
                async for text in response.aiter_text():
                    if text:
                        yield StdoutChunk(text)
        except httpx.HTTPError as e:
            logger.debug(f"HTTP request failed: {e!r}")
            yield StderrChunk(str(e) or type(e).__name__)
            yield Exit(1)
            return
        finally:
            if owns_client:
                await client.aclose()
        yield Exit(0)
