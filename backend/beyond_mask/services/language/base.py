"""Abstract script classifier interface used by the language policy."""

from abc import ABC, abstractmethod
from enum import Enum


class ScriptTag(str, Enum):
    HEBREW = "hebrew"
    LATIN = "latin"

    @property
    def language(self) -> str:
        return _LANGUAGE_CODES[self]


_LANGUAGE_CODES = {
    ScriptTag.HEBREW: "he",
    ScriptTag.LATIN: "en",
}


class BaseScriptClassifier(ABC):
    @abstractmethod
    def classify(self, text: str) -> ScriptTag | None:
        """Return the dominant script of ``text``, or None if undetermined."""
        ...
