"""Translator base class."""

from __future__ import annotations

from abc import ABC, abstractmethod

from markflow.models.direction import TranslationDirection


class Translator(ABC):
    """Abstract base class for external translation services.

    Implementations receive plain text (possibly several units joined with a
    separator character) and must return the translated string, or raise.
    """

    provider: str = "translator"

    @abstractmethod
    async def translate(self, text: str, direction: TranslationDirection) -> str:
        """Translate `text` for `direction`.

        Args:
            text: Source text.
            direction: Language pair.

        Returns:
            Translated text.
        """
        ...

    async def close(self) -> None:
        """Close any underlying resources (optional)."""
        return None

    async def __aenter__(self) -> "Translator":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: object | None,
    ) -> None:
        await self.close()
