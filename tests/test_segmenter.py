from __future__ import annotations

import pytest

from markflow.markdown.segmenter import extract_segments, render_segments, split_table_cells
from markflow.models.segment import SegmentType


@pytest.mark.parametrize(
    "text",
    [
        "",
        "Plain paragraph",
        "Line 1\n\nLine 2 with **bold**",
        "# Title\nSome text\n\n## Sub  title",
        "- one\n- two\n  continued\n1. first\n2. second",
        "| a | b |\n|---|---|\n| **x** | y \\| z |",
        "> quoted\n> still quoted\n>> nested",
        "```python\nprint('x')\n```\nafter",
        "~~~\nunterminated\n\nfence",
        "- [ ] todo\n- [x] done",
        "text\n   \ntrailing\n",
        "Intro\n---\n* * *\nOutro",
    ],
)
def test_extract_segments_round_trips_exactly(text: str) -> None:
    assert render_segments(extract_segments(text)) == text


def test_extract_segments_blank_line_is_own_segment() -> None:
    segments = extract_segments("Line 1\n\nLine 2")
    assert [s.type for s in segments] == [SegmentType.TEXT] * 3
    assert [s.content for s in segments] == ["Line 1", "", "Line 2"]


def test_extract_segments_code_block_flushes_pending_paragraph() -> None:
    segments = extract_segments("Here is some code:\n```ts\nconst a = 1;\n```\nAnd some text")
    assert [s.type for s in segments] == [SegmentType.TEXT, SegmentType.CODE, SegmentType.TEXT]
    assert segments[0].content == "Here is some code:"
    assert segments[1].content == "```ts\nconst a = 1;\n```"


def test_extract_segments_unterminated_fence_is_code() -> None:
    segments = extract_segments("before\n```\nnever closed\nstill code")
    assert segments[-1].type == SegmentType.CODE
    assert segments[-1].content == "```\nnever closed\nstill code"


def test_extract_segments_fence_closes_only_with_same_marker() -> None:
    segments = extract_segments("~~~\n```\ninside\n~~~")
    assert len(segments) == 1
    assert segments[0].type == SegmentType.CODE


def test_extract_segments_table_keeps_pipes_in_line_markers() -> None:
    segments = extract_segments("| Name | Value |\n|  a |  b  |  ")
    assert len(segments) == 1
    table = segments[0]
    assert table.type == SegmentType.TABLE_ROW
    assert table.lines == [" Name | Value ", "  a |  b  "]
    assert table.prefix_lines == ["|", "|"]
    assert table.suffix_lines == ["|", "|  "]


def test_split_table_cells_respects_escaped_pipe() -> None:
    assert split_table_cells(" a \\| b | c ") == [" a \\| b ", " c "]


def test_extract_segments_heading_prefix_keeps_spacing() -> None:
    (heading,) = extract_segments("###   Setup steps")
    assert heading.type == SegmentType.HEADING
    assert heading.prefix == "###   "
    assert heading.content == "Setup steps"


def test_extract_segments_list_kind_change_starts_new_segment() -> None:
    segments = extract_segments("- a\n- b\n1. c\n2. d\n- [ ] e")
    assert [s.type for s in segments] == [SegmentType.LIST_ITEM] * 3
    assert [s.lines for s in segments] == [["a", "b"], ["c", "d"], ["e"]]


def test_extract_segments_indented_line_continues_list_item() -> None:
    (segment,) = extract_segments("1. Install\n   - with pip\n   then restart\n2. Run")
    assert segment.lines == ["Install", "with pip", "then restart", "Run"]
    assert segment.prefix_lines == ["1. ", "   - ", "   ", "2. "]


def test_extract_segments_blockquote_groups_by_prefix() -> None:
    segments = extract_segments("> one\n> two\n>> three")
    assert [(s.prefix, s.content) for s in segments] == [("> ", "one\ntwo"), (">> ", "three")]


def test_extract_segments_spaced_rule_is_not_a_list() -> None:
    segments = extract_segments("- - -")
    assert segments[0].type == SegmentType.TEXT
    assert segments[0].content == "- - -"


def test_extract_segments_lone_pipe_is_paragraph_text() -> None:
    segments = extract_segments("|\nplain")
    assert [s.type for s in segments] == [SegmentType.TEXT]
    assert segments[0].content == "|\nplain"


def test_extract_segments_indented_line_outside_list_stays_paragraph() -> None:
    (segment,) = extract_segments("Paragraph\n    indented text")
    assert segment.type == SegmentType.TEXT
    assert segment.content == "Paragraph\n    indented text"
