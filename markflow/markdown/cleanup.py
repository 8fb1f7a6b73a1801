"""Heuristics applied around translation calls.

- `has_markdown`: decides between the structural pipeline and a plain call.
- `detect_translation_artifacts`: flags output that looks corrupted.
- `sanitize_placeholders`: strips placeholder tokens left by older
  placeholder-based protection schemes (``@@BOLD_0@@`` and friends).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_MARKDOWN_PATTERNS = (
    re.compile(r"^#{1,6}\s", re.MULTILINE),
    re.compile(r"\*\*[^*]+\*\*"),
    re.compile(r"\*[^*]+\*"),
    re.compile(r"\[[^\]]+\]\([^)]+\)"),
    re.compile(r"^```", re.MULTILINE),
    re.compile(r"`[^`]+`"),
    re.compile(r"^\s*[-*+]\s", re.MULTILINE),
    re.compile(r"^\s*\d+\.\s", re.MULTILINE),
    re.compile(r"^\|.+\|$", re.MULTILINE),
)

_WRAPPED_PLACEHOLDER_RE = re.compile(r"(@@?|__)[A-Z-]+_?\d+(@@?|__)")
_BARE_PLACEHOLDER_RE = re.compile(r"@[A-Z-]+_?\d+")
_LEAKED_PLACEHOLDER_RE = re.compile(r"@@[A-Z_]+\d+@@")
_REPETITION_RE = re.compile(r"(.{3,})\1{2,}")


def has_markdown(text: str) -> bool:
    return any(p.search(text) for p in _MARKDOWN_PATTERNS)


def sanitize_placeholders(text: str) -> str:
    out = _WRAPPED_PLACEHOLDER_RE.sub("", text)
    return _BARE_PLACEHOLDER_RE.sub("", out)


@dataclass
class ArtifactReport:
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def detect_translation_artifacts(text: str, *, max_word_chars: int = 40) -> ArtifactReport:
    report = ArtifactReport()

    long_words = [w for w in text.split() if len(w) > max_word_chars and "://" not in w]
    if long_words:
        report.errors.append(f"abnormally long words: {', '.join(w[:20] + '…' for w in long_words[:3])}")

    for m in _REPETITION_RE.finditer(text):
        if any(ch.isalnum() for ch in m.group(1)):
            report.errors.append(f"repeated pattern: {m.group(1)[:20]!r}")
            break

    if _LEAKED_PLACEHOLDER_RE.search(text):
        report.errors.append("placeholder tokens leaked into output")

    if text.count("```") % 2:
        report.errors.append("unbalanced code fences")

    pipe_counts = [line.count("|") for line in text.split("\n") if "|" in line]
    if len(pipe_counts) > 2 and len(set(pipe_counts)) > 1:
        report.errors.append("inconsistent table structure")

    return report
