"""Per-call request log.

A :class:`RequestLog` is opened right before the transport call and closed
exactly once with either ``finish`` (success) or ``error`` (failure). It
records a redacted snapshot of the payload, the terminal outcome and stream
metrics as structured events (``request.start``, ``request.end``,
``request.error``).

Logging is best-effort: a failure to serialize or emit a record never
propagates to the provider call.

Redaction replaces the value of any mapping key that looks like a credential
(``api_key``, ``authorization``, ``token`` ...) and scrubs every known secret
value wherever it appears inside strings.
"""
from __future__ import annotations

import contextlib
import logging
import uuid
from typing import Any, Iterable, Mapping, Optional, Tuple

from .log_support import LogContext
from .logging import get_logger, normalized_log_event

REDACTED = "***"

_SENSITIVE_KEY_MARKERS = (
    "api_key",
    "apikey",
    "api-key",
    "authorization",
    "password",
    "secret",
    "token",
)
# Keys that contain a marker but carry no credential.
_SAFE_KEYS = frozenset(("max_tokens", "max_completion_tokens", "tokens", "total_tokens",
                        "prompt_tokens", "completion_tokens", "input_tokens", "output_tokens"))


def is_sensitive_key(key: str) -> bool:
    k = key.lower()
    if k in _SAFE_KEYS:
        return False
    return any(marker in k for marker in _SENSITIVE_KEY_MARKERS)


def redact(value: Any, secrets: Iterable[str] = ()) -> Any:
    """Return a deep copy of ``value`` with credentials removed."""
    known = tuple(s for s in secrets if s)
    return _redact(value, known)


def _redact(value: Any, secrets: Tuple[str, ...]) -> Any:
    if isinstance(value, Mapping):
        return {
            k: (REDACTED if isinstance(k, str) and is_sensitive_key(k) else _redact(v, secrets))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(v, secrets) for v in value]
    if isinstance(value, str):
        for secret in secrets:
            if secret in value:
                value = value.replace(secret, REDACTED)
        return value
    return value


class RequestLog:
    """Structured log of one provider request."""

    def __init__(
        self,
        *,
        provider: str,
        model: str,
        payload: Mapping[str, Any],
        secrets: Iterable[str] = (),
        session_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.request_id = uuid.uuid4().hex
        self._secrets = tuple(s for s in secrets if s)
        self.ctx = LogContext(provider=provider, model=model, request_id=self.request_id,
                              session_id=session_id or None)
        self.payload = redact(dict(payload), self._secrets)
        self._logger = logger or get_logger(f"a8e.providers.{provider}")
        self._closed = False

    @classmethod
    def start(
        cls,
        *,
        provider: str,
        model: str,
        payload: Mapping[str, Any],
        secrets: Iterable[str] = (),
        session_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "RequestLog":
        log = cls(provider=provider, model=model, payload=payload, secrets=secrets,
                  session_id=session_id, logger=logger)
        log._emit(
            "request.start",
            phase="start",
            payload=log.payload,
            stream=bool(payload.get("stream")),
        )
        return log

    @property
    def closed(self) -> bool:
        return self._closed

    def finish(self, *, usage: Any = None, metrics: Any = None, **fields: Any) -> None:
        """Record a successful outcome. Later calls are ignored."""
        if self._closed:
            return
        self._closed = True
        self._emit(
            "request.end",
            phase="finalize",
            emitted=bool(getattr(metrics, "emitted", 0)),
            tokens=usage,
            metrics=metrics.to_dict() if metrics is not None and hasattr(metrics, "to_dict") else None,
            **fields,
        )

    def error(self, error: BaseException, *, metrics: Any = None, **fields: Any) -> None:
        """Record a failed (or abandoned) outcome. Later calls are ignored."""
        if self._closed:
            return
        self._closed = True
        code = getattr(getattr(error, "code", None), "value", type(error).__name__)
        self._emit(
            "request.error",
            phase="finalize",
            error_code=code,
            emitted=False,
            level=logging.WARNING,
            message=str(error),
            status=getattr(error, "status", None),
            metrics=metrics.to_dict() if metrics is not None and hasattr(metrics, "to_dict") else None,
            **fields,
        )

    def _emit(self, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
        with contextlib.suppress(Exception):
            clean = redact(fields, self._secrets)
            normalized_log_event(self._logger, event, self.ctx, level=level, **clean)


__all__ = ["RequestLog", "redact", "is_sensitive_key", "REDACTED"]
