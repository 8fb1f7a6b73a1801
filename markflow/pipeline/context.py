"""Request-scoped translation context.

One `TranslationContext` is created per `translate_with_markdown` call and
carries everything the batch translator needs. Nothing here is shared
between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markflow.config import AlignmentPolicy, BatchConfig, Settings
from markflow.models.direction import TranslationDirection
from markflow.providers.base import Translator


@dataclass
class TranslationStats:
    translator_calls: int = 0
    batches: int = 0
    exact_batches: int = 0
    realigned_batches: int = 0
    failed_batches: int = 0
    individual_calls: int = 0
    source_fallbacks: int = 0


@dataclass
class TranslationContext:
    translator: Translator
    direction: TranslationDirection
    batch: BatchConfig = field(default_factory=BatchConfig)
    policy: AlignmentPolicy = field(default_factory=AlignmentPolicy)
    stats: TranslationStats = field(default_factory=TranslationStats)

    @classmethod
    def from_settings(
        cls,
        translator: Translator,
        direction: TranslationDirection,
        settings: Settings,
    ) -> "TranslationContext":
        return cls(
            translator=translator,
            direction=direction,
            batch=settings.batch,
            policy=settings.alignment,
        )

    async def call(self, text: str) -> str:
        self.stats.translator_calls += 1
        return await self.translator.translate(text, self.direction)
