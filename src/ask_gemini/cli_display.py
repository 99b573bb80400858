"""CLI display functions for status, configuration and prompt commands.

This module contains the display/presentation logic for the CLI,
separated from the main CLI parsing and execution logic.
"""

import shutil

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ask_gemini.commands import CommandTable
from ask_gemini.request_builder import redacted_url
from ask_gemini.utils.config import Config, describe_settings

console = Console()


def show_status(config: Config, command_table: CommandTable):
    """Display configuration, transport availability and command count."""
    console.print(Panel.fit("[bold magenta]ask_gemini Status[/bold magenta]", border_style="magenta"))
    console.print()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("[bold]Gemini[/bold]", "")
    table.add_row("  Model", f"[bold green]{config.MODEL}[/bold green]")
    table.add_row("  Endpoint", f"[dim]{redacted_url(config.gemini_config())}[/dim]")
    if config.API_KEY:
        table.add_row("  API key", "[green]✓ set[/green]")
    else:
        table.add_row("  API key", "[red]✗ not set[/red] [dim](export GEMINI_API_KEY)[/dim]")
    table.add_row("", "")

    table.add_row("[bold]Transport[/bold]", "")
    table.add_row("  Selected", config.TRANSPORT)
    curl_found = shutil.which(config.CURL_PATH)
    if curl_found:
        table.add_row("  curl", f"[green]✓ {curl_found}[/green]")
    else:
        table.add_row("  curl", f"[yellow]⚠ '{config.CURL_PATH}' not found on PATH[/yellow]")
    timeout = f"{config.TIMEOUT_SECONDS:g}s" if config.TIMEOUT_SECONDS else "[dim]disabled[/dim]"
    table.add_row("  Timeout", timeout)
    table.add_row("", "")

    table.add_row("[bold]Commands[/bold]", "")
    table.add_row("  Registered", str(len(command_table)))
    if command_table.rejected:
        table.add_row("  Rejected", f"[yellow]{command_table.rejected} invalid item(s)[/yellow]")
    table.add_row("  User file", f"[dim]{config.COMMANDS_CONFIG_PATH}[/dim]")

    console.print(table)
    console.print()


def show_commands(command_table: CommandTable):
    """List prompt commands and what they send."""
    table = Table(title="Prompt Commands", title_style="bold magenta")
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Prompt")
    for command in command_table:
        prompt = command.prompt if command.uses_selection else "[dim](free-form question)[/dim]"
        table.add_row(command.name, prompt)
    console.print(table)
    console.print("[dim]Run one with: ask-gemini --cmd NAME --file PATH [--lines START:END][/dim]")


def show_config(config: Config):
    env_file_path = config.model_config.get('env_file', 'unknown')
    console.print("[bold magenta]Current Configuration Settings[/bold magenta]")
    console.print(f"[dim]Config file: {env_file_path}[/dim]\n")

    if not config.API_KEY:
        console.print("[yellow]⚠ Missing recommended settings:[/yellow]")
        console.print("  [red]✗[/red] GEMINI_API_KEY - Required to send requests")
        console.print()

    console.print("[bold]All Settings:[/bold]")
    for field_name, value in describe_settings(config).items():
        if value == "not set":
            value = "[dim]not set[/dim]"
        elif field_name == "API_KEY":
            value = "[green]****[/green] (set)"
        console.print(f"  [cyan]{field_name}[/cyan]: {value}", highlight=False)

    console.print("\n[dim]To set a value: ask-gemini --config-set KEY value[/dim]")
    console.print(f"[dim]Or edit: {env_file_path}[/dim]")
