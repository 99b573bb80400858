import argparse
import logging
import sys
import traceback
from pathlib import Path

from rich.console import Console

from ask_gemini.cli_display import show_commands, show_config, show_status
from ask_gemini.commands import ASK_COMMAND, COMMANDS_YAML_PATH, CommandTable, build_command_table
from ask_gemini.core import AskGemini, AskResult, create_transport_factory
from ask_gemini.display import PlainSurface, RichSurface
from ask_gemini.utils.config import Config, set_config_value
from ask_gemini.utils.input_handler import MultilineInputHandler, parse_line_range, read_selection
from ask_gemini.utils.logging import setup_logging

console = Console()
logger = logging.getLogger(__name__)


def parse_arguments(config_obj: Config, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask Google's Gemini a question, or ask about a selection of lines from a file")
    parser.add_argument("question", nargs="*", help="Your question for Gemini")
    parser.add_argument("-c", "--cmd", type=str, default=None, metavar="NAME", help="Prompt command to apply to the selection (e.g. Prompt, Refactor or AskGeminiRefactor). Use --list-commands to see all.")
    parser.add_argument("-f", "--file", type=str, default=None, help="File holding the selection for --cmd (default: stdin)")
    parser.add_argument("-l", "--lines", type=str, default=None, metavar="START:END", help="1-based inclusive line range of the selection (default: whole file)")
    parser.add_argument("-m", "--model", type=str, default=None, help=f"Gemini model id (Default: {config_obj.MODEL})")
    parser.add_argument("--api-key", type=str, default=None, help="Gemini API key (overrides GEMINI_API_KEY)")
    parser.add_argument("--transport", type=str, choices=["curl", "httpx"], default=None, help=f"How the request is sent (Default: {config_obj.TRANSPORT})")
    parser.add_argument("--timeout", type=float, default=None, help=f"Seconds to wait for a response, 0 to wait forever (Default: {config_obj.TIMEOUT_SECONDS:g})")
    parser.add_argument("--list-commands", action="store_true", help="List available prompt commands and exit")
    parser.add_argument("--status", action="store_true", help="Show configuration status and exit")
    parser.add_argument("--config-set", nargs=2, metavar=("KEY", "VALUE"), help="Set a configuration value (e.g., MODEL) in the .env file.")
    parser.add_argument("--config-list", action="store_true", help="List the current effective configuration settings.")
    parser.add_argument("--plain", action="store_true", help="Use plain text output")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging output.")
    return parser.parse_args(argv)


def load_command_table(config_obj: Config) -> CommandTable:
    """Package commands first, then the user's commands file."""
    return build_command_table(
        config_obj.DEFAULT_PROMPT,
        yaml_paths=[COMMANDS_YAML_PATH, Path(config_obj.COMMANDS_CONFIG_PATH).expanduser()],
    )


def build_asker(config_obj: Config) -> AskGemini:
    surface = PlainSurface() if config_obj.PLAIN_OUTPUT else RichSurface(console=console)
    return AskGemini(
        config=config_obj.gemini_config(),
        surface=surface,
        transport_factory=create_transport_factory(
            config_obj.TRANSPORT,
            curl_path=config_obj.CURL_PATH,
            timeout_seconds=config_obj.TIMEOUT_SECONDS,
        ),
        timeout_seconds=config_obj.TIMEOUT_SECONDS,
        verbose=config_obj.VERBOSE,
        curl_path=config_obj.CURL_PATH,
    )


def main(argv: list[str] | None = None):
    try:
        config_obj = Config()
    except Exception as e:
        # Catch pydantic validation errors or unreadable .env files
        console.print(f"[bold red]Error initializing configuration:[/bold red] {e}")
        sys.exit(1)

    args = parse_arguments(config_obj, argv)
    setup_logging(verbose=args.verbose, debug=args.debug)

    if args.api_key:
        config_obj = Config(API_KEY=args.api_key)
    if args.model:
        config_obj.MODEL = args.model
    if args.transport:
        config_obj.TRANSPORT = args.transport
    if args.timeout is not None:
        config_obj.TIMEOUT_SECONDS = args.timeout
    config_obj.VERBOSE = args.verbose
    config_obj.PLAIN_OUTPUT = args.plain
    config_obj.log_setup()

    if getattr(args, 'config_set', None):
        key, value = args.config_set
        if set_config_value(key, value, config_obj):
            console.print(f"[green]Configuration '{key}' set to '{value}' in {config_obj.model_config.get('env_file', 'unknown')}.[/green]")
            sys.exit(0)
        else:
            console.print(f"[bold red]Failed to set configuration '{key}'.[/bold red]")
            sys.exit(1)
        return

    command_table = load_command_table(config_obj)

    if getattr(args, 'config_list', False):
        show_config(config_obj)
        sys.exit(0)
        return
    elif getattr(args, 'status', False):
        show_status(config_obj, command_table)
        sys.exit(0)
        return
    elif getattr(args, 'list_commands', False):
        show_commands(command_table)
        sys.exit(0)
        return

    try:
        ok = run_app(args, config_obj, command_table)
    except KeyboardInterrupt:
        console.print("[bold red]Cancelled.[/bold red]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[bold red]An unexpected error occurred during application execution:[/bold red] {e}")
        if config_obj.VERBOSE:
            traceback.print_exc()
        sys.exit(1)
    else:
        sys.exit(0 if ok else 1)


def run_app(args: argparse.Namespace, config_obj: Config, command_table: CommandTable) -> bool:
    """Dispatch to a selection command, a one-shot question or interactive mode.

    Returns:
        True if a response was rendered.
    """
    asker = build_asker(config_obj)

    if args.cmd:
        return run_selection_command(asker, command_table, args)
    if args.file or args.lines:
        console.print("[yellow]Warning:[/yellow] --file/--lines only apply to --cmd; asking with the default prompt.")
        args.cmd = "Prompt"
        return run_selection_command(asker, command_table, args)

    if args.question:
        return _rendered(asker.ask(" ".join(args.question).strip()))

    if not sys.stdin.isatty():
        # Piped input - read once and exit
        piped_input = sys.stdin.read().strip()
        if not piped_input:
            console.print("[yellow]Empty input received. Nothing to ask.[/yellow]")
            return False
        return _rendered(asker.ask(piped_input))

    return run_interactive(asker)


def run_selection_command(asker: AskGemini, command_table: CommandTable, args: argparse.Namespace) -> bool:
    command = command_table.get(args.cmd)
    if command is None:
        console.print(f"[bold red]Unknown command: {args.cmd}[/bold red]. Use --list-commands to see available commands.")
        return False
    if not command.uses_selection:
        if args.file or args.lines:
            console.print(f"[yellow]Warning:[/yellow] {ASK_COMMAND} does not use a selection; ignoring --file/--lines.")
        return run_interactive(asker)

    try:
        line1, line2 = parse_line_range(args.lines) if args.lines else (1, None)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        return False
    if args.file is None and sys.stdin.isatty():
        console.print("[bold red]No selection:[/bold red] pass --file or pipe text on stdin.")
        return False
    try:
        selected_text = read_selection(args.file, line1, line2)
    except OSError as e:
        console.print(f"[bold red]Could not read selection:[/bold red] {e}")
        return False

    logger.debug(f"Running {command.name} on {len(selected_text)} selected characters")
    return _rendered(asker.ask_about_selection(command, selected_text))


def run_interactive(asker: AskGemini) -> bool:
    console.print("[bold green]Entering interactive mode. Type 'exit' or 'quit' to leave.[/bold green]", highlight=False)
    console.print("[bold green]Type '>' at the beginning of a line for multiline input mode (end with 'EOF' or Ctrl+C).[/bold green]", highlight=False)
    input_handler = MultilineInputHandler(console=console)
    rendered_any = False
    while True:
        try:
            prompt_text, _ = input_handler.get_input("Enter your question:")
            if prompt_text is None or prompt_text.strip().lower() in ["exit", "quit"]:
                console.print("[bold red]Exiting interactive mode.[/bold red]", highlight=False)
                console.print()
                break
            if not prompt_text.strip():
                console.print("[dim]Empty input received. Asking again...[/dim]")
                continue
            console.print()
            rendered_any = _rendered(asker.ask(prompt_text)) or rendered_any
            console.print()
        except (KeyboardInterrupt, EOFError):
            console.print("[bold red]Exiting interactive mode.[/bold red]", highlight=False)
            console.print()
            break
    return rendered_any


def _rendered(result: AskResult) -> bool:
    return result.resolution is not None
