import sys
from pathlib import Path
from typing import TextIO

from rich.console import Console


class MultilineInputHandler:
    """Handles both single-line and multiline input."""

    def __init__(self, console=None, stdin: TextIO | None = None):
        self.console = console or Console()
        self.stdin = stdin or sys.stdin

    def get_input(self, prompt_text="Enter your question:"):
        """
        Get user input, supporting both single and multiline modes.

        Args:
            prompt_text: The text to display before starting input collection

        Returns:
            tuple: (input_text, is_multiline)
        """
        self.console.print(f"[bold blue]{prompt_text}[/bold blue]")

        # Handle non-interactive mode
        if not self.stdin.isatty():
            data = self.stdin.read()
            if not data:
                raise EOFError
            return data, False

        try:
            initial_input = input("> ")

            if initial_input.strip() == ">":
                self.console.print("[bold blue]Multiline mode (type 'EOF' on a new line or press Ctrl+C to finish):[/bold blue]")
                return self._get_multiline_input(), True
            elif initial_input.strip().startswith(">"):
                # Rest of the line is the first line of the multiline block
                self.console.print("[bold blue]Multiline mode (type 'EOF' on a new line or press Ctrl+C to finish):[/bold blue]")
                first_line = initial_input.strip()[1:].lstrip()
                return self._get_multiline_input(first_line=first_line), True
            else:
                return initial_input, False

        except KeyboardInterrupt:
            self.console.print("\n[yellow]Input cancelled.[/yellow]")
            raise

    def _get_multiline_input(self, first_line=None):
        """Get input in multiline mode."""
        lines = []
        if first_line:
            lines.append(first_line)

        try:
            while True:
                line = input()
                if line.strip() == "EOF":
                    break
                lines.append(line)
        except (KeyboardInterrupt, EOFError):
            self.console.print("\n[italic]Input complete.[/italic]")
            return "\n".join(lines)

        self.console.print("[italic]Input complete.[/italic]")
        return "\n".join(lines)


def parse_line_range(value: str) -> tuple[int, int | None]:
    """Parse ``START:END``, ``START:`` or ``START`` into 1-based line numbers.

    Raises:
        ValueError: For malformed or inverted ranges.
    """
    start_text, sep, end_text = value.partition(":")
    try:
        start = int(start_text) if start_text.strip() else 1
        if sep:
            end = int(end_text) if end_text.strip() else None
        else:
            end = start
    except ValueError:
        raise ValueError(f"Invalid line range '{value}'. Use START:END, e.g. 10:20") from None
    if start < 1 or (end is not None and end < start):
        raise ValueError(f"Invalid line range '{value}'. Lines start at 1 and END must not be before START")
    return start, end


def select_lines(text: str, line1: int = 1, line2: int | None = None) -> str:
    """Lines ``line1``..``line2`` (1-based, inclusive) of ``text`` joined by newlines."""
    lines = text.splitlines()
    end = len(lines) if line2 is None else min(line2, len(lines))
    return "\n".join(lines[line1 - 1:end])


def read_selection(path: str | Path | None = None, line1: int = 1, line2: int | None = None, stdin: TextIO | None = None) -> str:
    """Collect the selected text from a file, or from stdin when no path is given."""
    if path is None:
        text = (stdin or sys.stdin).read()
    else:
        text = Path(path).expanduser().read_text(encoding="utf-8")
    return select_lines(text, line1, line2)
