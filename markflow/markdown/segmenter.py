"""Split markdown into structural segments.

The segmenter is a line-oriented state machine (normal / inside a fenced code
block). It never raises: any line it does not recognise ends up in a plain
paragraph segment. `render_segments(extract_segments(text)) == text` holds for
every input.

The round trip is exact at the segment level only. Translated bold, italic
and link text is trimmed on reconstruction, so `** a **` comes back as
`**a**` even under an identity translation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from markflow.models.segment import Segment, SegmentType

_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_TABLE_LINE_RE = re.compile(r"^(\s*\|)(.*)(\|\s*)$")
_BLOCKQUOTE_RE = re.compile(r"^(\s*>+\s*)(.+)$")
_HEADING_RE = re.compile(r"^(#{1,6}[ \t]+)(.+)$")
_HR_RE = re.compile(r"^\s*([-*_])(?:\s*\1){2,}\s*$")

_TASK_RE = re.compile(r"^(\s*[-*+]\s*\[[ xX]\]\s+)(.+)$")
_BULLET_RE = re.compile(r"^(\s*[-*+]\s+)(.+)$")
_NUMBERED_RE = re.compile(r"^(\s*\d+\.\s+)(.+)$")

# Order matters: a task line also matches the bullet pattern.
_LIST_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("task", _TASK_RE),
    ("bullet", _BULLET_RE),
    ("numbered", _NUMBERED_RE),
)

_CONTINUATION_INDENT = 2


def match_list_line(line: str) -> tuple[str, str, str] | None:
    """Return ``(kind, marker_prefix, content)`` for a list item line."""
    for kind, pattern in _LIST_PATTERNS:
        m = pattern.match(line)
        if m:
            return kind, m.group(1), m.group(2)
    return None


def is_horizontal_rule(line: str) -> bool:
    return bool(_HR_RE.match(line))


def split_table_cells(inner: str) -> list[str]:
    """Split the inner text of a table row on unescaped pipes.

    Cells keep their surrounding whitespace so that ``"|".join(cells) == inner``.
    """
    cells: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch == "\\" and i + 1 < len(inner):
            current.append(inner[i : i + 2])
            i += 2
            continue
        if ch == "|":
            cells.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    cells.append("".join(current))
    return cells


def _leading_spaces(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


@dataclass
class _Block:
    """Lines collected for the segment currently being built."""

    type: SegmentType
    prefix: str = ""
    kind: str = ""
    lines: list[str] = field(default_factory=list)
    prefix_lines: list[str] = field(default_factory=list)
    suffix_lines: list[str] = field(default_factory=list)

    def to_segment(self) -> Segment:
        return Segment(
            type=self.type,
            content="\n".join(self.lines),
            prefix=self.prefix,
            prefix_lines=list(self.prefix_lines),
            suffix_lines=list(self.suffix_lines),
        )


class _Segmenter:
    def __init__(self) -> None:
        self.segments: list[Segment] = []
        self.block: _Block | None = None
        self.fence: str | None = None
        self.code_lines: list[str] = []

    def flush(self) -> None:
        if self.block is not None:
            self.segments.append(self.block.to_segment())
            self.block = None

    def _open(self, block: _Block) -> _Block:
        self.flush()
        self.block = block
        return block

    def feed(self, line: str) -> None:
        fence = _FENCE_RE.match(line)
        if self.fence is not None:
            self.code_lines.append(line)
            if fence and fence.group(1) == self.fence:
                self.segments.append(Segment(type=SegmentType.CODE, content="\n".join(self.code_lines)))
                self.fence = None
                self.code_lines = []
            return
        if fence:
            self.flush()
            self.fence = fence.group(1)
            self.code_lines = [line]
            return

        table = _TABLE_LINE_RE.match(line)
        if table:
            block = self.block
            if block is None or block.type is not SegmentType.TABLE_ROW:
                block = self._open(_Block(type=SegmentType.TABLE_ROW))
            block.prefix_lines.append(table.group(1))
            block.lines.append(table.group(2))
            block.suffix_lines.append(table.group(3))
            return

        quote = _BLOCKQUOTE_RE.match(line)
        if quote:
            block = self.block
            if block is None or block.type is not SegmentType.TEXT or block.prefix != quote.group(1):
                block = self._open(_Block(type=SegmentType.TEXT, prefix=quote.group(1)))
            block.lines.append(quote.group(2))
            return

        heading = _HEADING_RE.match(line)
        if heading:
            self.flush()
            self.segments.append(
                Segment(type=SegmentType.HEADING, content=heading.group(2), prefix=heading.group(1))
            )
            return

        if is_horizontal_rule(line):
            self.flush()
            self.segments.append(Segment(type=SegmentType.TEXT, content=line))
            return

        if self._feed_list_line(line):
            return

        if not line.strip():
            self.flush()
            self.segments.append(Segment(type=SegmentType.TEXT, content=line))
            return

        block = self.block
        if block is None or block.type is not SegmentType.TEXT or block.prefix:
            block = self._open(_Block(type=SegmentType.TEXT))
        block.lines.append(line)

    def _feed_list_line(self, line: str) -> bool:
        item = match_list_line(line)
        block = self.block if self.block is not None and self.block.type is SegmentType.LIST_ITEM else None

        if block is not None and line.strip() and _leading_spaces(line) >= _CONTINUATION_INDENT:
            if item is None or item[0] != block.kind:
                # Nested content of the current item.
                if item is not None:
                    marker, content = item[1], item[2]
                else:
                    marker = line[: _leading_spaces(line)]
                    content = line[len(marker) :]
                block.prefix_lines.append(marker)
                block.lines.append(content)
                return True

        if item is None:
            return False

        kind, marker, content = item
        if block is None or block.kind != kind:
            block = self._open(_Block(type=SegmentType.LIST_ITEM, kind=kind))
        block.prefix_lines.append(marker)
        block.lines.append(content)
        return True

    def finish(self) -> list[Segment]:
        if self.fence is not None:
            self.flush()
            self.segments.append(Segment(type=SegmentType.CODE, content="\n".join(self.code_lines)))
            self.fence = None
            self.code_lines = []
        self.flush()
        return self.segments


def extract_segments(text: str) -> list[Segment]:
    """Split `text` into ordered structural segments."""
    segmenter = _Segmenter()
    for line in text.split("\n"):
        segmenter.feed(line)
    return segmenter.finish()


def render_segments(segments: list[Segment]) -> str:
    return "\n".join(segment.render() for segment in segments)
