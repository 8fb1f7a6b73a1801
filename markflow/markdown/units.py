"""Extract addressable translation units from segments."""

from __future__ import annotations

import re

from markflow.markdown.segmenter import is_horizontal_rule, split_table_cells
from markflow.markdown.tokenizer import tokenize
from markflow.models.segment import Segment, SegmentType
from markflow.models.token import InlineCodeToken, Token
from markflow.models.unit import TranslationUnit

_BLOCKQUOTE_PREFIX_RE = re.compile(r"^\s*>")
_TASK_MARKER_RE = re.compile(r"\[[ xX]\]")


def is_translatable_text(text: str) -> bool:
    """True when `text` has at least one letter or digit."""
    return any(ch.isalnum() for ch in text)


def is_translatable_segment(segment: Segment) -> bool:
    if segment.type is SegmentType.CODE:
        return False
    if not segment.content.strip():
        return False
    if segment.type is SegmentType.TEXT and is_horizontal_rule(segment.content):
        return False
    if _BLOCKQUOTE_PREFIX_RE.match(segment.prefix):
        return False
    markers = [segment.prefix, *segment.prefix_lines]
    if any(_TASK_MARKER_RE.search(m) for m in markers):
        return False
    return True


def tokenize_line(segment: Segment, line: str) -> list[list[Token]]:
    """Tokenize one segment line; table lines are tokenized cell by cell."""
    if segment.type is SegmentType.TABLE_ROW:
        return [tokenize(cell) for cell in split_table_cells(line)]
    return [tokenize(line)]


def segment_token_lines(segment: Segment) -> list[tuple[int | None, list[list[Token]]]]:
    """Return ``(line_index, cells)`` per addressable line of `segment`.

    Single-line segments (paragraphs, headings) are tokenized as a whole and
    report ``line_index=None``.
    """
    if segment.is_multiline:
        return [(i, tokenize_line(segment, line)) for i, line in enumerate(segment.lines)]
    return [(None, tokenize_line(segment, segment.content))]


def extract_units(segments: list[Segment]) -> list[TranslationUnit]:
    units: list[TranslationUnit] = []
    for segment_index, segment in enumerate(segments):
        if not is_translatable_segment(segment):
            continue
        for line_index, cells in segment_token_lines(segment):
            token_index = 0
            for tokens in cells:
                for token in tokens:
                    if not isinstance(token, InlineCodeToken) and is_translatable_text(token.text):
                        units.append(
                            TranslationUnit(
                                segment_index=segment_index,
                                line_index=line_index,
                                token_index=token_index,
                                kind=token.kind,
                                source_text=token.text,
                            )
                        )
                    token_index += 1
    return units
