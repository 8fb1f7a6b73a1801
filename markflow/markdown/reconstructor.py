"""Rebuild markdown from segments and translated units."""

from __future__ import annotations

import re

from markflow.markdown.units import is_translatable_segment, segment_token_lines
from markflow.models.segment import Segment, SegmentType
from markflow.models.token import (
    BoldToken,
    InlineCodeToken,
    ItalicToken,
    LinkToken,
    TextToken,
    Token,
)
from markflow.models.unit import TranslationMap, UnitAddress

_BULLET = "•"
_INLINE_BULLET_RE = re.compile(r"([^\n])\s*•\s*")
_LINE_START_BULLET_RE = re.compile(r"(^|\n)[ \t]*•[ \t]*")


def normalize_bullet_spacing(text: str) -> str:
    """Move bullets the translator glued mid-line onto their own line."""
    if _BULLET not in text:
        return text
    out = _INLINE_BULLET_RE.sub(r"\1\n• ", text)
    return _LINE_START_BULLET_RE.sub(r"\1• ", out)


def _surrounding_whitespace(text: str) -> tuple[str, str]:
    stripped = text.strip()
    if not stripped:
        return text, ""
    head = text[: len(text) - len(text.lstrip())]
    tail = text[len(text.rstrip()) :]
    return head, tail


def render_token(token: Token, translated: str | None) -> str:
    """Render one token with its translation, or its original text when None.

    Plain text keeps its surrounding whitespace. Bold, italic and link text is
    trimmed inside its wrappers.
    """
    if translated is None:
        return token.original
    match token:
        case InlineCodeToken():
            return token.original
        case TextToken():
            head, tail = _surrounding_whitespace(token.text)
            return f"{head}{translated.strip()}{tail}"
        case BoldToken() | ItalicToken():
            return f"{token.wrapper_start}{translated.strip()}{token.wrapper_end}"
        case LinkToken():
            return f"[{translated.strip()}]({token.url})"
        case _:
            raise TypeError(f"unsupported token: {token!r}")


def _render_line(
    segment_index: int,
    line_index: int | None,
    cells: list[list[Token]],
    translations: TranslationMap,
) -> str:
    rendered_cells: list[str] = []
    token_index = 0
    for tokens in cells:
        parts: list[str] = []
        for token in tokens:
            address = UnitAddress(segment_index=segment_index, token_index=token_index, line_index=line_index)
            parts.append(render_token(token, translations.get(address)))
            token_index += 1
        rendered_cells.append("".join(parts))
    return "|".join(rendered_cells)


def reconstruct_segment(segment_index: int, segment: Segment, translations: TranslationMap) -> str:
    if not is_translatable_segment(segment):
        return segment.render()

    source_lines = segment.lines if segment.is_multiline else [segment.content]
    lines: list[str] = []
    for (line_index, cells), source in zip(segment_token_lines(segment), source_lines, strict=True):
        line = _render_line(segment_index, line_index, cells, translations)
        if segment.type is not SegmentType.TABLE_ROW and _BULLET not in source:
            line = normalize_bullet_spacing(line)
        lines.append(line)
    return segment.render(lines)


def reconstruct_segments(segments: list[Segment], translations: TranslationMap) -> list[str]:
    return [reconstruct_segment(i, segment, translations) for i, segment in enumerate(segments)]


def reconstruct_text(segments: list[Segment], translations: TranslationMap) -> str:
    """Join reconstructed segments; missing translations fall back to source text."""
    return "\n".join(reconstruct_segments(segments, translations))
