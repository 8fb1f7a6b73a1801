"""Canonical error codes surfaced to callers."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    TRANSLATION_FAILED = "TRANSLATION_FAILED"
    TRANSLATION_TIMEOUT = "TRANSLATION_TIMEOUT"
    FLUSH_TIMEOUT = "FLUSH_TIMEOUT"
