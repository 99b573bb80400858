"""Display surfaces that show a Gemini resolution.

A surface follows a three-call contract: ``create()`` returns a handle,
``render(handle, text)`` replaces everything shown so far with ``text`` as
markdown, and ``destroy(handle)`` releases it. Each ask creates its own
handle, so surfaces hold no per-request state.
"""

from dataclasses import dataclass
from typing import Any, Protocol

from rich.align import Align
from rich.console import Console
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.spinner import Spinner

PANEL_TITLE = " Gemini Response "
LOADING_TEXT = "Asking Gemini..."


@dataclass
class SurfaceHandle:
    """One open viewer."""

    live: Live | None = None
    rendered: str | None = None
    closed: bool = False


class DisplaySurface(Protocol):
    def create(self) -> Any:
        ...

    def render(self, handle: Any, text: str) -> None:
        ...

    def destroy(self, handle: Any) -> None:
        ...


class RichSurface:
    """Live markdown panel on a rich console."""

    def __init__(self, console: Console | None = None, title: str = PANEL_TITLE, border_style: str = "blue"):
        self.console = console or Console()
        self.title = title
        self.border_style = border_style

    def _panel(self, renderable) -> Panel:
        return Panel(
            renderable,
            title=f"[bold {self.border_style}]{self.title}[/bold {self.border_style}]",
            title_align="center",
            border_style=self.border_style,
            padding=(1, 2),
        )

    def create(self) -> SurfaceHandle:
        live = Live(
            self._panel(Spinner("dots", text=LOADING_TEXT)),
            console=self.console,
            refresh_per_second=10,
            vertical_overflow="visible",
        )
        live.start(refresh=True)
        return SurfaceHandle(live=live)

    def render(self, handle: SurfaceHandle, text: str) -> None:
        if handle.closed:
            return
        handle.rendered = text
        handle.live.update(Align(self._panel(Markdown(text.strip() or " ")), align="left"), refresh=True)

    def destroy(self, handle: SurfaceHandle) -> None:
        if handle.closed:
            return
        handle.closed = True
        if handle.live is not None and handle.live.is_started:
            handle.live.stop()
        self.console.print()


class PlainSurface:
    """Writes the final text once, without formatting (``--plain``)."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    def create(self) -> SurfaceHandle:
        return SurfaceHandle()

    def render(self, handle: SurfaceHandle, text: str) -> None:
        handle.rendered = text

    def destroy(self, handle: SurfaceHandle) -> None:
        if handle.closed:
            return
        handle.closed = True
        if handle.rendered is not None:
            self.console.print(handle.rendered, markup=False, highlight=False)

