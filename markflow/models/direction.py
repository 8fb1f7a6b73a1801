"""Translation direction (language pair)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TranslationDirection:
    """Source/target language codes passed opaquely to the translator."""

    source: str
    target: str

    def __str__(self) -> str:
        return f"{self.source}-{self.target}"
