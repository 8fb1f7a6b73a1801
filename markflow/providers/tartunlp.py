"""TartuNLP-style `/translation/v2` HTTP translator."""

from __future__ import annotations

import logging
import time

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    wait_exponential,
)

from markflow.error_codes import ErrorCode
from markflow.exceptions import ProviderError
from markflow.models.direction import TranslationDirection
from markflow.providers.base import Translator

logger = logging.getLogger(__name__)

DEFAULT_TARTUNLP_URL = "https://api.tartunlp.ai/translation/v2"

_RETRYABLE_STATUS = {408, 429}
_MAX_RETRY_AFTER_S = 30.0

_WAIT_NORMAL = wait_exponential(min=1, max=10)
_WAIT_RATE_LIMIT = wait_exponential(min=2, max=30)


class _RetryableTranslationError(ProviderError):
    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status_code: int | None = None,
        retry_after: float | None = None,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        super().__init__(provider, message, error_code=error_code)
        self.status_code = status_code
        self.retry_after = retry_after


def _stop_retry(state: RetryCallState) -> bool:
    max_retries = 3
    if state.args:
        max_retries = int(getattr(state.args[0], "max_retries", max_retries))
    return state.attempt_number > max_retries


def _wait_retry(state: RetryCallState) -> float:
    exc = state.outcome.exception() if state.outcome else None
    if isinstance(exc, _RetryableTranslationError):
        if exc.retry_after is not None:
            return min(max(exc.retry_after, 0.0), _MAX_RETRY_AFTER_S)
        if exc.status_code == 429:
            return _WAIT_RATE_LIMIT(state)
    return _WAIT_NORMAL(state)


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    provider = "translator"
    if state.args:
        provider = getattr(state.args[0], "provider", provider)
    wait_s = state.next_action.sleep if state.next_action else None
    logger.warning(
        "translation retrying (provider=%s, attempt=%s, wait_s=%s, error=%s)",
        provider,
        state.attempt_number,
        wait_s,
        exc,
    )


def _parse_retry_after(response: httpx.Response) -> float | None:
    raw = str(response.headers.get("retry-after") or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _format_http_error(response: httpx.Response) -> str:
    status = response.status_code
    reason = response.reason_phrase
    detail = response.text.strip() if response.content else ""
    if detail:
        if len(detail) > 2000:
            detail = detail[:2000] + "…"
        return f"HTTP {status} {reason}: {detail}"
    return f"HTTP {status} {reason}"


class TartuNLPTranslator(Translator):
    """Client for a TartuNLP-compatible machine translation endpoint."""

    def __init__(
        self,
        api_url: str = DEFAULT_TARTUNLP_URL,
        *,
        application: str = "markflow",
        domain: str | None = None,
        timeout: float = 25.0,
        max_retries: int = 3,
        provider: str = "tartunlp",
    ) -> None:
        self.provider = provider
        self.api_url = str(api_url or DEFAULT_TARTUNLP_URL).strip()
        self.application = application
        self.domain = domain
        self.timeout = float(timeout)
        self.max_retries = max(0, int(max_retries))
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.application:
            headers["application"] = self.application
        return headers

    def _payload(self, text: str, direction: TranslationDirection) -> dict[str, str]:
        payload = {"text": text, "src": direction.source, "tgt": direction.target}
        if self.domain:
            payload["domain"] = self.domain
        if self.application:
            payload["application"] = self.application
        return payload

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @retry(
        retry=retry_if_exception_type(_RetryableTranslationError),
        stop=_stop_retry,
        wait=_wait_retry,
        before_sleep=_log_retry,
        reraise=True,
    )
    async def _post(self, text: str, direction: TranslationDirection) -> str:
        client = await self._get_client()
        started = time.perf_counter()
        try:
            response = await client.post(
                self.api_url,
                headers=self._headers(),
                json=self._payload(text, direction),
            )
        except httpx.TimeoutException as exc:
            raise _RetryableTranslationError(
                self.provider,
                f"request timeout: {exc}",
                error_code=ErrorCode.TRANSLATION_TIMEOUT,
            ) from exc
        except httpx.TransportError as exc:
            raise _RetryableTranslationError(
                self.provider,
                str(exc),
                error_code=ErrorCode.TRANSLATION_FAILED,
            ) from exc

        status = response.status_code
        if status >= 400:
            message = _format_http_error(response)
            if status in _RETRYABLE_STATUS or status >= 500:
                raise _RetryableTranslationError(
                    self.provider,
                    message,
                    status_code=status,
                    retry_after=_parse_retry_after(response),
                    error_code=ErrorCode.TRANSLATION_TIMEOUT if status == 408 else ErrorCode.TRANSLATION_FAILED,
                )
            raise ProviderError(self.provider, message, error_code=ErrorCode.TRANSLATION_FAILED)

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(
                self.provider, f"invalid JSON response: {exc}", error_code=ErrorCode.TRANSLATION_FAILED
            ) from exc
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, str):
            raise ProviderError(
                self.provider, "response has no 'result' string", error_code=ErrorCode.TRANSLATION_FAILED
            )

        latency_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "translation call (provider=%s, direction=%s, chars=%s, latency_ms=%s)",
            self.provider,
            direction,
            len(text),
            latency_ms,
        )
        return result

    async def translate(self, text: str, direction: TranslationDirection) -> str:
        if not text.strip():
            return text
        try:
            return await self._post(text, direction)
        except _RetryableTranslationError as exc:
            if exc.status_code == 408:
                logger.warning(
                    "translation timed out upstream after retries; returning source (provider=%s)",
                    self.provider,
                )
                return text
            raise

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TartuNLPTranslator":
        await self._get_client()
        return self
