# Re-export the pipeline entry points
from .core import AskGemini, AskResult
from .models.gemini import GeminiConfig, PromptCommand
from .resolver import ResponseResolver
