from __future__ import annotations

import pytest

from markflow.markdown.reconstructor import normalize_bullet_spacing, reconstruct_text
from markflow.markdown.segmenter import extract_segments, render_segments
from markflow.markdown.units import extract_units, is_translatable_segment
from markflow.models.token import TokenKind
from markflow.models.unit import UnitAddress


def _translate_all(text: str, fn) -> str:  # noqa: ANN001
    segments = extract_segments(text)
    units = extract_units(segments)
    return reconstruct_text(segments, {u.address: fn(u.source_text) for u in units})


@pytest.mark.parametrize(
    "text",
    [
        "Hello **world** and **universe**",
        "# Guide\n\nUse `npm i` then [open](http://x) it.\n\n- one\n- *two*",
        "| Col | Other |\n| --- | --- |\n| a **b** | c |",
        "```\ncode\n```\n> quote\n- [x] task\n---",
        "  leading and trailing  \n\n",
    ],
)
def test_identity_translation_round_trips(text: str) -> None:
    assert _translate_all(text, lambda s: s) == text


def test_uppercase_translation_keeps_wrappers() -> None:
    assert _translate_all("Hello **world** and **universe**", str.upper) == "HELLO **WORLD** AND **UNIVERSE**"


def test_extract_units_skips_inline_code() -> None:
    units = extract_units(extract_segments("Use `console.log()` to **debug** your code"))
    assert [u.source_text for u in units] == ["Use ", " to ", "debug", " your code"]
    assert [u.token_index for u in units] == [0, 2, 3, 4]
    assert units[2].kind == TokenKind.BOLD
    out = _translate_all("Use `console.log()` to **debug** your code", lambda s: f"<{s.strip()}>")
    assert out == "<Use> `console.log()` <to> **<debug>** <your code>"


def test_extract_units_addresses_lines_of_lists_and_tables() -> None:
    segments = extract_segments("Intro\n- first\n- second\n\n| a | b |\n|---|---|")
    units = extract_units(segments)
    assert [u.address for u in units] == [
        UnitAddress(segment_index=0, token_index=0),
        UnitAddress(segment_index=1, line_index=0, token_index=0),
        UnitAddress(segment_index=1, line_index=1, token_index=0),
        UnitAddress(segment_index=3, line_index=0, token_index=0),
        UnitAddress(segment_index=3, line_index=0, token_index=1),
    ]
    assert str(units[1].address) == "1:0:0"


@pytest.mark.parametrize(
    "text",
    ["```\nx\n```", "> quoted text", "- [ ] task item", "***", "   "],
)
def test_non_translatable_segments_yield_no_units(text: str) -> None:
    segments = extract_segments(text)
    assert not any(is_translatable_segment(s) for s in segments)
    assert extract_units(segments) == []


def test_reconstruct_preserves_line_count() -> None:
    text = "Line 1\n\nLine 2 with **bold**"
    out = _translate_all(text, lambda s: f"x{s.strip()}x")
    assert out.count("\n") == text.count("\n")
    assert "**xboldx**" in out


def test_reconstruct_link_keeps_url() -> None:
    out = _translate_all("See [the docs](https://example.com/docs)", lambda s: s.upper())
    assert out == "SEE [THE DOCS](https://example.com/docs)"


def test_reconstruct_table_cells_keep_padding() -> None:
    out = _translate_all("| Name  | Value |\n|-------|-------|\n| apple | pie   |", str.upper)
    assert out == "| NAME  | VALUE |\n|-------|-------|\n| APPLE | PIE   |"


def test_reconstruct_missing_translation_falls_back_to_source() -> None:
    segments = extract_segments("Hello **world**")
    assert reconstruct_text(segments, {}) == "Hello **world**"


def test_reconstruct_reflows_injected_bullets() -> None:
    out = _translate_all("1. Start pumping. Then stop.", lambda s: "Álggat pumpema.   •   Deavdde")
    assert out == "1. Álggat pumpema.\n• Deavdde"


def test_normalize_bullet_spacing() -> None:
    assert (
        normalize_bullet_spacing("2. Álggat pumpema.   •   Deavdde boalu.")
        == "2. Álggat pumpema.\n• Deavdde boalu."
    )
    assert normalize_bullet_spacing("Intro •first") == "Intro\n• first"
    assert normalize_bullet_spacing("no bullets here") == "no bullets here"


def test_identity_translation_trims_padding_inside_bold() -> None:
    segments = extract_segments("x ** a ** y")
    assert render_segments(segments) == "x ** a ** y"
    assert _translate_all("x ** a ** y", lambda s: s) == "x **a** y"
