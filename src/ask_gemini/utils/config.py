import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console

from ask_gemini.models.gemini import DEFAULT_API_BASE_URL, GeminiConfig

DEFAULT_MODEL = "gemini-1.5-flash-latest"
DEFAULT_PROMPT = "Explain the following code:"

logger = logging.getLogger(__name__)
console = Console()


def get_config_dir() -> Path:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config_home) / "ask-gemini"


def get_default_commands_yaml_path() -> Path:
    env_path = os.environ.get("ASK_GEMINI_COMMANDS_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return get_config_dir() / "commands.yaml"


DOTENV_PATH = get_config_dir() / ".env"


class Config(BaseSettings):
    MODEL: str = Field(default=DEFAULT_MODEL, description="Gemini model id used in the request URL")
    DEFAULT_PROMPT: str = Field(default=DEFAULT_PROMPT, description="Prompt applied to the selection by AskGeminiPrompt")
    # The key is read from GEMINI_API_KEY like the Gemini tooling does; ASK_GEMINI_API_KEY works too
    API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "ASK_GEMINI_API_KEY"),
        description="Gemini API key",
    )
    API_BASE_URL: str = Field(default=DEFAULT_API_BASE_URL, description="Scheme and host of the Gemini API")
    TRANSPORT: str = Field(default="curl", description="How requests are sent: 'curl' (helper process) or 'httpx' (in-process)")
    CURL_PATH: str = Field(default="curl", description="curl executable used by the curl transport")
    TIMEOUT_SECONDS: float = Field(default=120, description="Give up on a request after this many seconds (0 disables)")
    COMMANDS_CONFIG_PATH: str = Field(default_factory=lambda: str(get_default_commands_yaml_path()), description="YAML file with user prompt commands")

    # --- UI/Interaction Settings --- #
    VERBOSE: bool = Field(default=False, description="Verbose mode for debugging")
    PLAIN_OUTPUT: bool = Field(default=False, description="Use plain text output without Rich formatting")

    _api_key_from_setup: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_prefix="ASK_GEMINI_",
        env_file=DOTENV_PATH,
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra='ignore'
    )

    def __init__(self, **values: Any):
        # An explicit key beats the environment
        api_key = values.pop("API_KEY", None) or values.pop("api_key", None)
        super().__init__(**values)
        if api_key:
            self.API_KEY = api_key
            self._api_key_from_setup = True

    def gemini_config(self) -> GeminiConfig:
        """Freeze the values an ask needs."""
        return GeminiConfig(
            model=self.MODEL,
            default_prompt=self.DEFAULT_PROMPT,
            api_key=self.API_KEY or None,
            api_base_url=self.API_BASE_URL,
        )

    def log_setup(self) -> None:
        if self._api_key_from_setup:
            logger.info("Using Gemini API key from setup options.")
        if not self.API_KEY:
            logger.warning("GEMINI_API_KEY is not set. Set environment variable or pass api_key in setup.")
        logger.info(f"askGemini setup complete. Model: {self.MODEL}")


SECRET_FIELDS = {"API_KEY"}


def describe_settings(config: Config) -> Dict[str, str]:
    """Current settings as display strings, with secrets masked."""
    described: Dict[str, str] = {}
    for field_name in sorted(Config.model_fields.keys()):
        value = getattr(config, field_name)
        if field_name in SECRET_FIELDS:
            described[field_name] = "****" if value else "not set"
        elif value is None or (isinstance(value, str) and not value.strip()):
            described[field_name] = "not set"
        else:
            described[field_name] = repr(value)
    return described


def settable_keys() -> List[str]:
    return sorted(k for k in Config.model_fields.keys() if k.isupper())


def set_config_value(key: str, value: str, config: Config) -> bool:
    """Sets a configuration value in the .env file.

    Args:
        key: The configuration key (e.g., 'MODEL').
        value: The value to set.
        config: The loaded Config object to get the .env path and validate keys.

    Returns:
        True if successful, False otherwise.
    """
    dotenv_path = Path(config.model_config['env_file'])
    key_upper = key.upper()
    if key_upper not in settable_keys():
        console.print(f"[bold red]Error:[/bold red] Invalid configuration key '{key}'. Valid keys are: {', '.join(settable_keys())}")
        return False
    env_var_name = f"{config.model_config['env_prefix']}{key_upper}"

    lines = []
    found = False
    try:
        if dotenv_path.is_file():
            with open(dotenv_path, 'r', encoding='utf-8') as f:
                lines = f.readlines()
    except IOError as e:
        console.print(f"[bold red]Error reading {dotenv_path}:[/bold red] {e}")
        return False
    new_line = f"{env_var_name}={value}\n"
    updated_lines = []
    for line in lines:
        if line.strip().startswith(f"{env_var_name}="):
            updated_lines.append(new_line)
            found = True
        else:
            updated_lines.append(line)

    if not found:
        updated_lines.append(new_line)
    try:
        dotenv_path.parent.mkdir(parents=True, exist_ok=True)
        with open(dotenv_path, 'w', encoding='utf-8') as f:
            f.writelines(updated_lines)
        return True
    except IOError as e:
        console.print(f"[bold red]Error writing to {dotenv_path}:[/bold red] {e}")
        return False
