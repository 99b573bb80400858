"""
Rich-formatted logging for ask_gemini.

Three verbosity levels:
- Normal: warnings and errors only, rich-formatted on stderr
- Verbose (--verbose): adds INFO events such as setup notices
- Debug (--debug): low-level DEBUG messages, unformatted

Usage:
    from ask_gemini.utils.logging import setup_logging

    setup_logging(verbose=args.verbose, debug=args.debug)
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "asyncio",
    "markdown_it",
]

_console: Console | None = None


def get_console() -> Console:
    """Get the shared stderr console used for log output."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure root logging for the CLI.

    Args:
        verbose: Show INFO events
        debug: Show DEBUG events with a plain timestamped format
    """
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S",
            force=True,
        )
    else:
        logging.basicConfig(
            level=logging.INFO if verbose else logging.WARNING,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(
                console=get_console(),
                show_path=False,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
            )],
            force=True,
        )

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING if not debug else logging.INFO)
