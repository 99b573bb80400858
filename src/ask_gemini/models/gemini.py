from dataclasses import dataclass

DEFAULT_API_BASE_URL = "https://generativelanguage.googleapis.com"


@dataclass(frozen=True)
class GeminiConfig:
    """Settings a single ask needs, frozen once setup is done."""

    model: str
    default_prompt: str
    api_key: str | None = None
    api_base_url: str = DEFAULT_API_BASE_URL

    def with_api_key(self, api_key: str | None) -> "GeminiConfig":
        """Return a copy with an explicit key override."""
        return GeminiConfig(
            model=self.model,
            default_prompt=self.default_prompt,
            api_key=api_key,
            api_base_url=self.api_base_url,
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


@dataclass(frozen=True)
class AskRequest:
    """The question sent to Gemini."""

    question: str

    def to_payload(self) -> dict:
        return {"contents": [{"parts": [{"text": self.question}]}]}


@dataclass(frozen=True)
class PromptCommand:
    """A named command that applies a fixed prompt to the selected text.

    A command without a prompt is the free-form question entry point.
    """

    name: str
    prompt: str | None = None
    description: str = ""

    @property
    def uses_selection(self) -> bool:
        return self.prompt is not None

    def build_question(self, selected_text: str) -> str:
        """Wrap the selection in a fenced block after the command's prompt."""
        if self.prompt is None:
            return selected_text
        return f"{self.prompt}\n\n```\n{selected_text}\n```"
