"""Streaming chunk aggregation at natural break points.

Text arrives in arbitrary fragments (e.g. tokens from a streaming LLM
response). `ChunkAggregator` buffers them and hands complete, break-safe
chunks to a callback one at a time, in arrival order, so each chunk can be
translated independently without cutting a sentence or an open markdown
span in half.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections import deque
from collections.abc import Awaitable, Callable

from markflow.config import AggregatorConfig
from markflow.exceptions import FlushTimeoutError

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[str], Awaitable[None]]

_SENTENCE_END_RE = re.compile(r"[.!?](\*\*|\*|`|_)*$")
_TABLE_ROW_END_RE = re.compile(r"\|\s*$")
_LIST_ITEM_RE = re.compile(r"\n[-*+]\s|\n\d+\.\s")
_FENCE_END_RE = re.compile(r"(```|~~~)\s*$")
_UNDERSCORE_RE = re.compile(r"\b_|_\b")
_FENCE_LINE_RE = re.compile(r"^\s*(```|~~~)", re.MULTILINE)

_BREAK_CANDIDATE_RES = (
    re.compile(r"[.!?](\*\*|\*|`|_)*\s+"),  # sentence end
    re.compile(r"\n{2,}"),  # paragraph
    re.compile(r"\|[ \t]*\n"),  # terminated table row
    re.compile(r"\n(?=(?:[-*+]|\d+\.)\s)"),  # list item start
    re.compile(r"^[ \t]*(?:```|~~~)[ \t]*\n", re.MULTILINE),  # fence line
)


def is_markdown_balanced(text: str) -> bool:
    """True when no bold/code/italic/underscore/link span is left open."""
    if text.count("**") % 2:
        return False
    if text.count("`") % 2:
        return False
    if text.replace("**", "").count("*") % 2:
        return False
    if len(_UNDERSCORE_RE.findall(text)) % 2:
        return False
    return text.count("[") == text.count("]")


def _inside_open_fence(text: str) -> bool:
    return len(_FENCE_LINE_RE.findall(text)) % 2 == 1


def has_natural_break(text: str) -> bool:
    if not text:
        return False
    trimmed = text.rstrip()
    if _SENTENCE_END_RE.search(trimmed):
        return is_markdown_balanced(trimmed)
    if text.endswith("\n\n"):
        return True
    if _TABLE_ROW_END_RE.search(trimmed) and "|" in trimmed:
        return True
    if _LIST_ITEM_RE.search(text):
        return True
    return bool(_FENCE_END_RE.search(text))


def split_at_last_break(text: str) -> tuple[str, str]:
    """Split `text` at its rightmost safe break.

    Returns ``(complete, remainder)``; ``("", text)`` when no break is safe.
    """
    best = 0
    for pattern in _BREAK_CANDIDATE_RES:
        for m in pattern.finditer(text):
            cut = m.end()
            if cut <= best:
                continue
            head = text[:cut]
            if is_markdown_balanced(head.rstrip()) and not _inside_open_fence(head):
                best = cut
    return text[:best], text[best:]


class ChunkAggregator:
    """Buffer streamed fragments and dispatch break-safe chunks in order."""

    def __init__(
        self,
        on_translate: ChunkCallback,
        *,
        min_chunk_size: int | None = None,
        flush_timeout_s: float | None = None,
        poll_interval_s: float | None = None,
        config: AggregatorConfig | None = None,
    ) -> None:
        cfg = config or AggregatorConfig()
        self.on_translate = on_translate
        self.min_chunk_size = int(cfg.min_chunk_size if min_chunk_size is None else min_chunk_size)
        self.flush_timeout_s = float(cfg.flush_timeout_s if flush_timeout_s is None else flush_timeout_s)
        self.poll_interval_s = float(cfg.poll_interval_s if poll_interval_s is None else poll_interval_s)

        self._buffer = ""
        self._queue: deque[str] = deque()
        self._sent: set[str] = set()
        self._processing = False
        self._worker: asyncio.Task[None] | None = None

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def pending(self) -> int:
        return len(self._queue)

    def get_accumulated(self) -> str:
        """Text received but not yet handed to the callback."""
        return self._buffer

    def is_complete(self) -> bool:
        """True when nothing is buffered, queued or being translated."""
        return not self._processing and not self._queue and not self._buffer

    async def add_chunk(self, fragment: str) -> None:
        if not fragment:
            return
        self._buffer += fragment

        if not has_natural_break(self._buffer):
            return
        head, tail = split_at_last_break(self._buffer)
        if not head or len(head.strip()) < self.min_chunk_size:
            return
        self._buffer = tail
        self._enqueue(head)

    async def flush(self) -> None:
        """Dispatch the remaining buffer and wait until every chunk is handled."""
        if self._buffer:
            self._enqueue(self._buffer)
            self._buffer = ""
        try:
            await asyncio.wait_for(self._wait_idle(), timeout=self.flush_timeout_s)
        except asyncio.TimeoutError as exc:
            logger.error(
                "aggregator flush timed out (timeout_s=%s, pending=%s)",
                self.flush_timeout_s,
                len(self._queue),
            )
            raise FlushTimeoutError(self.flush_timeout_s, pending=len(self._queue)) from exc

    def _enqueue(self, chunk: str) -> None:
        self._queue.append(chunk)
        if not self._processing:
            self._processing = True
            self._worker = asyncio.create_task(self._drain())

    async def _wait_idle(self) -> None:
        while self._processing or self._queue:
            await asyncio.sleep(self.poll_interval_s)

    async def _drain(self) -> None:
        try:
            while self._queue:
                chunk = self._queue.popleft()
                key = chunk.strip()
                if key and key in self._sent:
                    logger.warning("duplicate chunk skipped (chars=%s)", len(chunk))
                    continue
                if key:
                    self._sent.add(key)
                try:
                    await self.on_translate(chunk)
                except Exception:
                    self._sent.discard(key)
                    logger.exception("chunk callback failed (chars=%s)", len(chunk))
        finally:
            self._processing = False
