"""
Structured provider error exception type.

Wraps transport, status and decode failures with a normalized `ErrorCode` for
consistent handling, retry logic, and structured logging.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message taken from the backend or the
            transport layer.
        provider: Provider key where the error originated (e.g., ``"paean_ai"``).
        model: Optional model name associated with the failure.
        status: HTTP status code when the failure came from a response.
        retryable: Marks transport-level failures (connection reset, timeout)
            that the retry layer may re-attempt.
        retry_after: Backend-suggested delay in seconds (``Retry-After``).
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str = "unknown"
    model: Optional[str] = None
    status: Optional[int] = None
    retryable: bool = False
    retry_after: Optional[float] = None
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["ProviderError"]
