from abc import ABC, abstractmethod
from typing import AsyncIterator

from ..models.outcome import TransportOutcome


class Transport(ABC):
    """Abstract base class for the transports that carry one request."""

    name: str = "transport"

    @abstractmethod
    def run(self, url: str, body: bytes) -> AsyncIterator[TransportOutcome]:
        """Execute the call, yielding outcomes as they occur.

        Yields any interleaving of ``StdoutChunk`` and ``StderrChunk``,
        then exactly one ``Exit`` as the final item.

        Raises:
            TransportStartError: If the call could not be started at all.
        """

    async def aclose(self) -> None:
        """Abort an in-flight call. Safe to call when nothing is running."""
        return None
