"""Translation pipeline: batching, orchestration and streaming aggregation."""

from markflow.pipeline.aggregator import ChunkAggregator, has_natural_break, split_at_last_break
from markflow.pipeline.batch_translator import BatchTranslator
from markflow.pipeline.context import TranslationContext, TranslationStats
from markflow.pipeline.translate import translate_messages, translate_with_markdown

__all__ = [
    "BatchTranslator",
    "ChunkAggregator",
    "TranslationContext",
    "TranslationStats",
    "has_natural_break",
    "split_at_last_break",
    "translate_messages",
    "translate_with_markdown",
]
