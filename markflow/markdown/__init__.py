"""Markdown decomposition and reassembly."""

from markflow.markdown.cleanup import detect_translation_artifacts, has_markdown, sanitize_placeholders
from markflow.markdown.reconstructor import normalize_bullet_spacing, reconstruct_text
from markflow.markdown.segmenter import extract_segments, render_segments
from markflow.markdown.tokenizer import render_tokens, tokenize
from markflow.markdown.units import extract_units

__all__ = [
    "detect_translation_artifacts",
    "extract_segments",
    "extract_units",
    "has_markdown",
    "normalize_bullet_spacing",
    "reconstruct_text",
    "render_segments",
    "render_tokens",
    "sanitize_placeholders",
    "tokenize",
]
