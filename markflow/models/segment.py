"""Structural segment model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SegmentType(str, Enum):
    TEXT = "text"
    CODE = "code"
    TABLE_ROW = "table-row"
    HEADING = "heading"
    LIST_ITEM = "list-item"


@dataclass
class Segment:
    """A structural block of a markdown document.

    `content` holds the block's lines joined with ``\\n`` and stripped of
    their markers. Markers are kept in `prefix`/`suffix` (same for every line)
    or in `prefix_lines`/`suffix_lines` (one entry per line, taking precedence).
    Code blocks keep fences inside `content`.
    """

    type: SegmentType
    content: str
    prefix: str = ""
    suffix: str = ""
    prefix_lines: list[str] = field(default_factory=list)
    suffix_lines: list[str] = field(default_factory=list)

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")

    @property
    def is_multiline(self) -> bool:
        return self.type in (SegmentType.TABLE_ROW, SegmentType.LIST_ITEM)

    def line_prefix(self, index: int) -> str:
        if index < len(self.prefix_lines):
            return self.prefix_lines[index]
        return self.prefix

    def line_suffix(self, index: int) -> str:
        if index < len(self.suffix_lines):
            return self.suffix_lines[index]
        return self.suffix

    def render(self, lines: list[str] | None = None) -> str:
        """Render the segment back to markdown, optionally with replaced line bodies."""
        body = self.lines if lines is None else lines
        if self.type is SegmentType.CODE:
            return "\n".join(body)
        return "\n".join(
            f"{self.line_prefix(i)}{line}{self.line_suffix(i)}" for i, line in enumerate(body)
        )
