"""
Normalized provider error codes (taxonomy).

Defines the `ErrorCode` enumeration used across the transport, retry and
decoding layers. Values are lowercase snake_case and are considered a stable
public contract for logging.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories.

    ``REQUEST_FAILED`` covers transport failures and backend-reported
    operational errors; ``USAGE`` covers malformed caller input and
    malformed/unexpected response shapes; ``AUTH`` covers missing or rejected
    credentials. The remaining codes refine ``REQUEST_FAILED`` for statuses
    the retry layer treats specially.
    """

    AUTH = "auth"
    USAGE = "usage"
    REQUEST_FAILED = "request_failed"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    CONTEXT_LENGTH_EXCEEDED = "context_length_exceeded"
    CANCELLED = "cancelled"


__all__ = ["ErrorCode"]
