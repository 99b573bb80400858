"""Prompt commands for ask_gemini.

Commands are plain data: a name plus the prompt applied to the selected text.
``AskGemini`` (free-form question) and ``AskGeminiPrompt`` (selection with the
default prompt) are always present; more come from ``user_questions`` lists in
commands.yaml files or from setup options.
"""

import logging
from pathlib import Path
from typing import Any, Iterable

import yaml

from .models.gemini import PromptCommand

logger = logging.getLogger(__name__)

# Package defaults, next to this module
COMMANDS_YAML_PATH = Path(__file__).parent / "commands.yaml"

COMMAND_PREFIX = "AskGemini"
ASK_COMMAND = COMMAND_PREFIX
PROMPT_COMMAND = f"{COMMAND_PREFIX}Prompt"

INVALID_ITEM_WARNING = "Invalid item format in 'user_questions'. Expected {cmd = '...', prompt = '...'}."


def load_user_questions(yaml_path: Path) -> list[Any]:
    """Read the raw ``user_questions`` list from a YAML file.

    A missing file is not an error. Items are returned unvalidated.
    """
    try:
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug(f"No commands file at {yaml_path}")
        return []
    except yaml.YAMLError as e:
        logger.error(f"Error parsing {yaml_path}: {e}")
        return []

    if not data:
        return []
    if not isinstance(data, dict) or not isinstance(data.get("user_questions", []), list):
        logger.warning(f"Invalid format in {yaml_path}: expected a top-level 'user_questions' list")
        return []
    return list(data.get("user_questions") or [])


def parse_user_question(item: Any) -> PromptCommand | None:
    """Validate one ``{cmd, prompt}`` item. Returns None if it is invalid."""
    if not isinstance(item, dict):
        return None
    cmd = item.get("cmd")
    prompt = item.get("prompt")
    if not isinstance(cmd, str) or not cmd.strip():
        return None
    if not isinstance(prompt, str) or not prompt.strip():
        return None
    return PromptCommand(
        name=f"{COMMAND_PREFIX}{cmd.strip()}",
        prompt=prompt,
        description=f"Ask Gemini: {prompt}",
    )


class CommandTable:
    """Registered prompt commands, looked up by name."""

    def __init__(self, default_prompt: str):
        self._commands: dict[str, PromptCommand] = {}
        self.rejected = 0
        self.register(PromptCommand(ASK_COMMAND, None, "Ask Gemini interactively"))
        self.register(PromptCommand(PROMPT_COMMAND, default_prompt, f"Ask Gemini about selection ({default_prompt})"))

    def register(self, command: PromptCommand) -> None:
        key = command.name.lower()
        if key in self._commands:
            logger.debug(f"Replacing command {command.name}")
        self._commands[key] = command

    def register_user_questions(self, items: Iterable[Any]) -> int:
        """Register each valid item; invalid ones are skipped with a warning.

        Returns:
            The number of commands registered.
        """
        registered = 0
        for item in items:
            command = parse_user_question(item)
            if command is None:
                logger.warning(INVALID_ITEM_WARNING)
                self.rejected += 1
                continue
            if command.name.lower() in (ASK_COMMAND.lower(), PROMPT_COMMAND.lower()):
                logger.warning(f"Command name {command.name} is reserved; skipping")
                self.rejected += 1
                continue
            self.register(command)
            registered += 1
        return registered

    def get(self, name: str) -> PromptCommand | None:
        """Find a command by full name or by its suffix (``Explain`` or ``AskGeminiExplain``)."""
        key = name.strip().lower()
        if not key:
            return None
        command = self._commands.get(key)
        if command is None and not key.startswith(COMMAND_PREFIX.lower()):
            command = self._commands.get(f"{COMMAND_PREFIX.lower()}{key}")
        return command

    def __iter__(self):
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None


def build_command_table(
    default_prompt: str,
    user_questions: Iterable[Any] | None = None,
    yaml_paths: Iterable[Path] = (),
) -> CommandTable:
    """Build the table from YAML files (in order) and then explicit items."""
    table = CommandTable(default_prompt)
    for path in yaml_paths:
        count = table.register_user_questions(load_user_questions(Path(path)))
        if count:
            logger.debug(f"Loaded {count} commands from {path}")
    if user_questions:
        table.register_user_questions(user_questions)
    return table
