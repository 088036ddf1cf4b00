"""Translation backend contract and the fixed set of engines."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional


class EngineType(Enum):
    BAIDU = "baidu"
    GOOGLE = "google"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    GEMINI = "gemini"

    @property
    def display_name(self) -> str:
        return ENGINE_DISPLAY_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> "EngineType":
        """
        Look up an engine by its config name.

        Raises:
            ValueError: If the name is not a supported engine
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            supported = ", ".join(engine.value for engine in cls)
            raise ValueError(f"Unsupported translation engine '{name}' (supported: {supported})")


ENGINE_DISPLAY_NAMES = {
    EngineType.BAIDU: "Baidu",
    EngineType.GOOGLE: "Google",
    EngineType.OPENAI: "OpenAI",
    EngineType.DEEPSEEK: "DeepSeek",
    EngineType.GEMINI: "Gemini",
}

CHAT_ENGINES = (EngineType.OPENAI, EngineType.DEEPSEEK, EngineType.GEMINI)


class TranslationBackend(ABC):
    """Interface used by the translation pipeline."""

    @abstractmethod
    def translate(self, text: str, source_language: str, target_language: str) -> Optional[List[str]]:
        """
        Translate newline separated text.

        Args:
            text: One entry value (or list item) per line
            source_language: Source language code
            target_language: Target language code

        Returns:
            Translated lines, one per input line, or None on failure.
            Implementations may raise BackendFailure instead of returning None.
        """
        ...

    def check_configuration(self) -> None:
        """Raise ConfigurationError if the backend cannot be used. No-op by default."""
        return None
