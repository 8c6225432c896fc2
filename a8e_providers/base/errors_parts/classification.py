"""
Error classification helpers.

Maps HTTP statuses and foreign exceptions (``httpx`` transport errors,
timeouts) to normalized :class:`ErrorCode` values, and decides which errors
the retry layer may re-attempt.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .error_code import ErrorCode
from .provider_error import ProviderError


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    429: ErrorCode.RATE_LIMIT,
}

_CONTEXT_LENGTH_MARKERS = (
    "context length",
    "context_length_exceeded",
    "maximum context",
    "too many tokens",
    "reduce the length",
)


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def code_for_status(status: int, message: str = "") -> ErrorCode:
    """Map an HTTP error status (plus envelope message) to an ``ErrorCode``."""
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    if status == 400 and any(m in message.lower() for m in _CONTEXT_LENGTH_MARKERS):
        return ErrorCode.CONTEXT_LENGTH_EXCEEDED
    return ErrorCode.REQUEST_FAILED


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ProviderError passthrough.
        2. Cancellation.
        3. HTTP status mapping.
        4. ``REQUEST_FAILED`` fallback (transport, timeout, unknown).
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, asyncio.CancelledError):
        return ErrorCode.CANCELLED
    status = _extract_status(exc)
    if status is not None and status >= 400:
        return code_for_status(status, str(exc))
    return ErrorCode.REQUEST_FAILED


def transport_error(
    exc: BaseException,
    *,
    provider: str,
    model: Optional[str] = None,
) -> ProviderError:
    """Convert an ``httpx`` transport-level exception into a ``ProviderError``.

    Connection failures, protocol errors and timeouts are summarized into a
    ``REQUEST_FAILED`` error marked retryable. An invalid URL or other
    programmer-side request problem is a ``USAGE`` error.
    """
    if isinstance(exc, ProviderError):
        return exc
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return ProviderError(
            code=ErrorCode.USAGE, message=f"invalid request target: {exc}",
            provider=provider, model=model, raw=exc,
        )
    if isinstance(exc, httpx.TimeoutException):
        summary = f"request timed out ({type(exc).__name__})"
        return ProviderError(
            code=ErrorCode.REQUEST_FAILED, message=summary, provider=provider,
            model=model, retryable=True, raw=exc,
        )
    if isinstance(exc, httpx.TransportError):
        detail = str(exc) or type(exc).__name__
        return ProviderError(
            code=ErrorCode.REQUEST_FAILED, message=f"transport failure: {detail}",
            provider=provider, model=model, retryable=True, raw=exc,
        )
    return ProviderError(
        code=classify_exception(exc), message=str(exc) or type(exc).__name__,
        provider=provider, model=model, status=_extract_status(exc), raw=exc,
    )


def is_retryable(error: BaseException) -> bool:
    """Return True when the retry layer may re-attempt after ``error``.

    Rate limits (429), server failures (5xx) and transport failures are
    retryable. Authentication, usage, context-length and every other 4xx
    failure are fatal. The HTTP status wins over the code so a 5xx whose body
    could not be parsed is still retried and a 4xx never is.
    """
    if not isinstance(error, ProviderError):
        return False
    if error.code in (ErrorCode.AUTH, ErrorCode.USAGE, ErrorCode.CANCELLED, ErrorCode.CONTEXT_LENGTH_EXCEEDED):
        return False
    if error.status is not None:
        return error.status == 429 or error.status >= 500
    if error.code in (ErrorCode.RATE_LIMIT, ErrorCode.SERVER_ERROR):
        return True
    return error.retryable


__all__ = [
    "classify_exception",
    "code_for_status",
    "transport_error",
    "is_retryable",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
