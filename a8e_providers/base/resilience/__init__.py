"""Resilience helpers (retry/backoff)."""

from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry, with_retry

__all__ = ["DEFAULT_RETRY_CONFIG", "RetryConfig", "retry", "with_retry"]
