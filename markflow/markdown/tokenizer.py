"""Inline markdown tokenizer.

Four pattern families (inline code, links, bold, italic) are matched
independently over the whole line. Candidates are ordered by start position
(longer first on ties) and accepted greedily; a candidate overlapping an
already accepted span is dropped. Gaps between accepted spans become text
tokens, so concatenating `token.original` always gives back the input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from markflow.models.token import (
    BoldToken,
    InlineCodeToken,
    ItalicToken,
    LinkToken,
    TextToken,
    Token,
)

_INLINE_CODE_RE = re.compile(r"`([^`]+)`")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_BOLD_RE = re.compile(r"(\*\*|(?<!\w)__)([^*_]+?)\1")
_ITALIC_RE = re.compile(r"(\*|(?<!\w)_)([^*_]+?)\1")


@dataclass(frozen=True)
class _Candidate:
    start: int
    end: int
    token: Token


def _underscore_closes_word(content: str, end: int) -> bool:
    return end < len(content) and (content[end].isalnum() or content[end] == "_")


def _collect(content: str) -> list[_Candidate]:
    out: list[_Candidate] = []
    for m in _INLINE_CODE_RE.finditer(content):
        out.append(_Candidate(m.start(), m.end(), InlineCodeToken(text=m.group(1), original=m.group(0))))
    for m in _LINK_RE.finditer(content):
        out.append(
            _Candidate(m.start(), m.end(), LinkToken(text=m.group(1), original=m.group(0), url=m.group(2)))
        )
    for pattern, factory in ((_BOLD_RE, BoldToken), (_ITALIC_RE, ItalicToken)):
        for m in pattern.finditer(content):
            wrapper = m.group(1)
            if wrapper.startswith("_") and _underscore_closes_word(content, m.end()):
                continue
            out.append(
                _Candidate(
                    m.start(),
                    m.end(),
                    factory(
                        text=m.group(2),
                        original=m.group(0),
                        wrapper_start=wrapper,
                        wrapper_end=wrapper,
                    ),
                )
            )
    return out


def tokenize(content: str) -> list[Token]:
    """Tokenize one line (or one table cell) of markdown."""
    if not content:
        return []

    candidates = sorted(_collect(content), key=lambda c: (c.start, -(c.end - c.start)))
    accepted: list[_Candidate] = []
    last_end = 0
    for cand in candidates:
        if cand.start < last_end:
            continue
        accepted.append(cand)
        last_end = cand.end

    tokens: list[Token] = []
    pos = 0
    for cand in accepted:
        if cand.start > pos:
            tokens.append(TextToken(text=content[pos : cand.start]))
        tokens.append(cand.token)
        pos = cand.end
    if pos < len(content):
        tokens.append(TextToken(text=content[pos:]))
    return tokens


def render_tokens(tokens: list[Token]) -> str:
    return "".join(token.original for token in tokens)
