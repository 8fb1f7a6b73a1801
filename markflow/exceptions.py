"""Markflow exception hierarchy."""

from __future__ import annotations

from markflow.error_codes import ErrorCode


class MarkflowError(Exception):
    """Base error for markflow."""


class ConfigurationError(MarkflowError):
    """Raised when configuration or inputs are invalid."""


class ProviderError(MarkflowError):
    """Raised when an external translation provider call fails."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.error_code = error_code


class FlushTimeoutError(MarkflowError):
    """Raised when a streaming aggregator does not drain before its deadline."""

    def __init__(
        self,
        timeout_s: float,
        *,
        pending: int = 0,
        error_code: ErrorCode | str | None = ErrorCode.FLUSH_TIMEOUT,
    ) -> None:
        super().__init__(f"flush did not complete within {timeout_s:g}s (pending={pending})")
        self.timeout_s = timeout_s
        self.pending = pending
        self.error_code = error_code
