"""Batch translation units and re-align the translator's output.

Units of one segment are joined with a single separator character and sent
in one call. The translator usually keeps the separator, but it can also
drop it (merging units) or invent extra ones (splitting a unit). The
recovery rules below map whatever comes back onto the original units so
that every unit always ends up with some text; the worst case is the
unit's own source text.
"""

from __future__ import annotations

import logging
import re

from markflow.config import AlignmentPolicy
from markflow.models.unit import TranslationMap, TranslationUnit
from markflow.pipeline.context import TranslationContext

logger = logging.getLogger(__name__)

_BOLD_WRAP_RE = re.compile(r"^\*\*(.+)\*\*$", re.DOTALL)
_LEADING_CLOSER_RE = re.compile(r"^[)\]}]+\s*[a-z]")


def looks_corrupted(text: str, policy: AlignmentPolicy) -> bool:
    """Detect a header translation that picked up a neighbour's fragment."""
    stripped = text.strip()
    if _LEADING_CLOSER_RE.match(stripped):
        return True
    words = [re.escape(w) for w in policy.filler_words if w]
    if not words:
        return False
    return re.search(rf"\b(?:{'|'.join(words)})\b", stripped, re.IGNORECASE) is not None


def clean_individual_translation(text: str) -> str:
    stripped = text.strip()
    m = _BOLD_WRAP_RE.match(stripped)
    if m:
        stripped = m.group(1).strip()
    return stripped


def join_fragments(fragments: list[str]) -> str:
    """Merge parts the translator split out of one unit."""
    out = fragments[0]
    for prev, frag in zip(fragments, fragments[1:]):
        head = frag.strip()
        if (head and head[0].isupper()) or prev.strip().endswith("."):
            out = f"{out.rstrip()} {frag.lstrip()}"
        else:
            out += frag
    return out


def group_batches(units: list[TranslationUnit], max_units: int) -> list[list[TranslationUnit]]:
    """Group units by segment (first-appearance order) and cap each batch size."""
    groups: dict[int, list[TranslationUnit]] = {}
    for unit in units:
        groups.setdefault(unit.segment_index, []).append(unit)

    size = max(1, int(max_units))
    batches: list[list[TranslationUnit]] = []
    for group in groups.values():
        for start in range(0, len(group), size):
            batches.append(group[start : start + size])
    return batches


class BatchTranslator:
    def __init__(self, context: TranslationContext) -> None:
        self.context = context

    @property
    def policy(self) -> AlignmentPolicy:
        return self.context.policy

    async def translate_units(self, units: list[TranslationUnit]) -> TranslationMap:
        """Translate every unit; the returned map covers all unit addresses.

        A unit whose own text contains the separator cannot be told apart from
        its neighbours after splitting, so it is sent on its own.
        """
        sep = self.context.batch.separator
        out: TranslationMap = {}
        for batch in group_batches(units, self.context.batch.max_units_per_batch):
            joinable: list[TranslationUnit] = []
            for unit in batch:
                if sep in unit.source_text:
                    logger.debug("unit contains separator, translating alone (unit=%s)", unit.address)
                    out[unit.address] = await self._translate_individually(unit)
                else:
                    joinable.append(unit)
            if joinable:
                out.update(await self._translate_batch(joinable))
        return out

    async def _translate_batch(self, batch: list[TranslationUnit]) -> TranslationMap:
        ctx = self.context
        sep = ctx.batch.separator
        ctx.stats.batches += 1
        try:
            translated = await ctx.call(sep.join(u.source_text for u in batch))
            parts = translated.split(sep)
            if len(parts) == len(batch):
                ctx.stats.exact_batches += 1
                return await self._assign_exact(batch, parts)

            ctx.stats.realigned_batches += 1
            logger.warning(
                "batch misaligned (segment=%s, units=%s, parts=%s)",
                batch[0].segment_index,
                len(batch),
                len(parts),
            )
            if len(parts) == 1:
                return self._assign_merged(batch, parts[0])
            if len(parts) > len(batch):
                return await self._assign_over_split(batch, parts)
            return await self._assign_under_split(batch, parts)
        except Exception:
            ctx.stats.failed_batches += 1
            ctx.stats.source_fallbacks += len(batch)
            logger.warning(
                "batch translation failed, keeping source text (segment=%s, units=%s)",
                batch[0].segment_index,
                len(batch),
                exc_info=True,
            )
            return {u.address: u.source_text for u in batch}

    async def _assign_exact(self, batch: list[TranslationUnit], parts: list[str]) -> TranslationMap:
        out: TranslationMap = {}
        for unit, part in zip(batch, parts, strict=True):
            if self.policy.is_header(unit.source_text):
                out[unit.address] = await self._accept_header(unit, part)
            else:
                out[unit.address] = part
        return out

    def _assign_merged(self, batch: list[TranslationUnit], merged: str) -> TranslationMap:
        out: TranslationMap = {batch[0].address: merged}
        for unit in batch[1:]:
            out[unit.address] = unit.source_text
        self.context.stats.source_fallbacks += len(batch) - 1
        return out

    async def _assign_over_split(self, batch: list[TranslationUnit], parts: list[str]) -> TranslationMap:
        out: TranslationMap = {}
        pi = 0
        for i, unit in enumerate(batch):
            if pi >= len(parts):
                out[unit.address] = self._source_fallback(unit)
                continue

            if self.policy.is_header(unit.source_text):
                if parts[pi].strip().endswith(self.policy.header_suffix):
                    out[unit.address] = await self._accept_header(unit, parts[pi])
                    pi += 1
                else:
                    out[unit.address] = self._source_fallback(unit)
                continue

            extra = (len(parts) - pi) - (len(batch) - i)
            fragments = [parts[pi]]
            pi += 1
            while extra > 0 and pi < len(parts) and not self.policy.is_header(parts[pi]):
                fragments.append(parts[pi])
                pi += 1
                extra -= 1
            out[unit.address] = join_fragments(fragments)
        return out

    async def _assign_under_split(self, batch: list[TranslationUnit], parts: list[str]) -> TranslationMap:
        out: TranslationMap = {}
        pi = 0
        for unit in batch:
            if pi >= len(parts):
                out[unit.address] = await self._translate_individually(unit)
                continue

            unit_is_header = self.policy.is_header(unit.source_text)
            if unit_is_header and self.policy.is_header(parts[pi]):
                out[unit.address] = await self._accept_header(unit, parts[pi])
                pi += 1
            elif unit_is_header:
                out[unit.address] = await self._translate_individually(unit)
            else:
                out[unit.address] = parts[pi]
                pi += 1
        return out

    async def _accept_header(self, unit: TranslationUnit, candidate: str) -> str:
        if not looks_corrupted(candidate, self.policy):
            return candidate
        logger.warning(
            "header translation looks corrupted, retranslating (unit=%s, candidate=%r)",
            unit.address,
            candidate[:80],
        )
        retranslated = await self._call_individually(unit)
        return candidate if retranslated is None else retranslated

    async def _translate_individually(self, unit: TranslationUnit) -> str:
        translated = await self._call_individually(unit)
        if translated is None:
            return self._source_fallback(unit)
        return translated

    async def _call_individually(self, unit: TranslationUnit) -> str | None:
        self.context.stats.individual_calls += 1
        try:
            translated = await self.context.call(unit.source_text)
        except Exception:
            logger.warning("individual translation failed (unit=%s)", unit.address, exc_info=True)
            return None
        cleaned = clean_individual_translation(translated)
        return cleaned or None

    def _source_fallback(self, unit: TranslationUnit) -> str:
        self.context.stats.source_fallbacks += 1
        return unit.source_text
