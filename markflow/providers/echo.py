"""Identity translator (dry runs and local testing)."""

from __future__ import annotations

from markflow.models.direction import TranslationDirection
from markflow.providers.base import Translator


class EchoTranslator(Translator):
    provider = "echo"

    async def translate(self, text: str, direction: TranslationDirection) -> str:
        return text
