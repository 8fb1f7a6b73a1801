"""Inline token model (tagged union)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, TypeAlias


class TokenKind(str, Enum):
    TEXT = "text"
    INLINE_CODE = "inline-code"
    BOLD = "bold"
    ITALIC = "italic"
    LINK = "link"


@dataclass(frozen=True)
class TextToken:
    text: str

    kind: ClassVar[TokenKind] = TokenKind.TEXT

    @property
    def original(self) -> str:
        return self.text


@dataclass(frozen=True)
class InlineCodeToken:
    text: str
    original: str

    kind: ClassVar[TokenKind] = TokenKind.INLINE_CODE


@dataclass(frozen=True)
class BoldToken:
    text: str
    original: str
    wrapper_start: str
    wrapper_end: str

    kind: ClassVar[TokenKind] = TokenKind.BOLD


@dataclass(frozen=True)
class ItalicToken:
    text: str
    original: str
    wrapper_start: str
    wrapper_end: str

    kind: ClassVar[TokenKind] = TokenKind.ITALIC


@dataclass(frozen=True)
class LinkToken:
    """`[text](url)`; only `text` is ever translated."""

    text: str
    original: str
    url: str

    kind: ClassVar[TokenKind] = TokenKind.LINK


Token: TypeAlias = TextToken | InlineCodeToken | BoldToken | ItalicToken | LinkToken
