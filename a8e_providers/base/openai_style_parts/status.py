"""Classify non-success responses from OpenAI-compatible backends.

``handle_status`` returns 2xx responses untouched. For anything else it reads
the body, extracts the ``{"error": {"message": ...}}`` envelope when present
and raises a :class:`ProviderError` carrying the HTTP status so the retry
layer can decide on re-attempts. Bodies that are not JSON, or that lack the
envelope, produce a generic ``REQUEST_FAILED`` message naming the status;
decoding problems never escape as raw exceptions.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx

from ..errors import ErrorCode, ProviderError, code_for_status


def error_message_from_body(body: Any) -> Optional[str]:
    """Return the backend error message from an error envelope, if any.

    Accepts ``{"error": {"message": str}}`` and the looser
    ``{"error": str}`` / ``{"message": str}`` shapes some gateways emit.
    """
    if not isinstance(body, dict):
        return None
    err = body.get("error")
    if isinstance(err, dict):
        msg = err.get("message")
        if isinstance(msg, str) and msg:
            return msg
    if isinstance(err, str) and err:
        return err
    msg = body.get("message")
    if isinstance(msg, str) and msg and err is not None:
        return msg
    return None


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a ``Retry-After`` header (delta seconds or HTTP date)."""
    if not value:
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        seconds = (when - datetime.now(timezone.utc)).total_seconds()
    return max(0.0, seconds)


def _status_text(response: httpx.Response) -> str:
    phrase = response.reason_phrase
    return f"{response.status_code} {phrase}".strip() if phrase else str(response.status_code)


async def handle_status(
    response: httpx.Response,
    *,
    provider: str = "unknown",
    model: Optional[str] = None,
) -> httpx.Response:
    """Pass 2xx responses through; raise a classified error otherwise.

    The response is closed before raising.

    Raises:
        ProviderError: With ``status`` set to the HTTP status code.
    """
    if response.is_success:
        return response
    try:
        raw = await response.aread()
    except httpx.HTTPError:
        raw = b""
    finally:
        await response.aclose()

    message: Optional[str] = None
    try:
        message = error_message_from_body(json.loads(raw)) if raw else None
    except ValueError:
        message = None

    status = response.status_code
    if message is None:
        code = ErrorCode.REQUEST_FAILED
        message = f"request failed with status {_status_text(response)}"
    else:
        code = code_for_status(status, message)

    retry_after = parse_retry_after(response.headers.get("retry-after")) if status == 429 else None
    raise ProviderError(
        code=code,
        message=message,
        provider=provider,
        model=model,
        status=status,
        retry_after=retry_after,
    )


__all__ = ["handle_status", "error_message_from_body", "parse_retry_after"]
