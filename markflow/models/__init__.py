"""Core data models for markflow."""

from markflow.models.direction import TranslationDirection
from markflow.models.segment import Segment, SegmentType
from markflow.models.token import (
    BoldToken,
    InlineCodeToken,
    ItalicToken,
    LinkToken,
    TextToken,
    Token,
    TokenKind,
)
from markflow.models.unit import TranslationMap, TranslationUnit, UnitAddress

__all__ = [
    "BoldToken",
    "InlineCodeToken",
    "ItalicToken",
    "LinkToken",
    "Segment",
    "SegmentType",
    "TextToken",
    "Token",
    "TokenKind",
    "TranslationDirection",
    "TranslationMap",
    "TranslationUnit",
    "UnitAddress",
]
