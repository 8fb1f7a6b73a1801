"""Markdown-preserving translation entry points."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from markflow.config import Settings
from markflow.markdown.cleanup import detect_translation_artifacts, has_markdown, sanitize_placeholders
from markflow.markdown.reconstructor import reconstruct_text
from markflow.markdown.segmenter import extract_segments
from markflow.markdown.units import extract_units
from markflow.models.direction import TranslationDirection
from markflow.pipeline.batch_translator import BatchTranslator
from markflow.pipeline.context import TranslationContext
from markflow.providers.base import Translator

logger = logging.getLogger(__name__)


async def _translate_plain(ctx: TranslationContext, text: str, settings: Settings) -> str:
    try:
        translated = await ctx.call(text)
        retries = int(settings.translation.artifact_retries)
        for attempt in range(1, retries + 1):
            report = detect_translation_artifacts(
                translated, max_word_chars=int(settings.translation.max_word_chars)
            )
            if report.is_valid:
                break
            logger.warning(
                "translation artifacts detected, retrying (attempt=%s, errors=%s)",
                attempt,
                "; ".join(report.errors),
            )
            translated = await ctx.call(text)
        return translated
    except Exception:
        ctx.stats.failed_batches += 1
        logger.warning("plain translation failed, keeping source text (chars=%s)", len(text), exc_info=True)
        return text


async def translate_with_markdown(
    text: str,
    *,
    translator: Translator,
    direction: TranslationDirection,
    preserve_formatting: bool | None = None,
    settings: Settings | None = None,
    context: TranslationContext | None = None,
) -> str:
    """Translate `text`, keeping its markdown structure intact.

    Only the inner text of paragraphs, headings, list items, table cells and
    bold/italic/link spans reaches the translator. Code, blockquotes, task
    lists and horizontal rules pass through untouched. Translator failures
    never propagate: affected parts keep their source text.

    Args:
        text: Markdown source.
        translator: External translation service.
        direction: Language pair.
        preserve_formatting: Use the structural pipeline (defaults to
            ``settings.translation.preserve_formatting``).
        settings: Optional settings; defaults are loaded from the environment.
        context: Optional pre-built request context (exposes statistics).

    Returns:
        Translated markdown.
    """
    if not text.strip():
        return text

    if settings is None:
        settings = Settings()
    ctx = context or TranslationContext.from_settings(translator, direction, settings)
    preserve = settings.translation.preserve_formatting if preserve_formatting is None else preserve_formatting

    if not preserve or not has_markdown(text):
        return await _translate_plain(ctx, text, settings)

    segments = extract_segments(text)
    units = extract_units(segments)
    if not units:
        logger.debug("no translatable units (segments=%s)", len(segments))
        return text

    translations = await BatchTranslator(ctx).translate_units(units)
    out = sanitize_placeholders(reconstruct_text(segments, translations))
    logger.debug(
        "markdown translated (segments=%s, units=%s, calls=%s, realigned=%s, failed=%s)",
        len(segments),
        len(units),
        ctx.stats.translator_calls,
        ctx.stats.realigned_batches,
        ctx.stats.failed_batches,
    )
    return out


async def translate_messages(
    messages: Iterable[str],
    *,
    translator: Translator,
    direction: TranslationDirection,
    preserve_formatting: bool | None = None,
    settings: Settings | None = None,
) -> list[str]:
    """Translate several texts in order, each with its own request context."""
    if settings is None:
        settings = Settings()
    out: list[str] = []
    for message in messages:
        out.append(
            await translate_with_markdown(
                message,
                translator=translator,
                direction=direction,
                preserve_formatting=preserve_formatting,
                settings=settings,
            )
        )
    return out
