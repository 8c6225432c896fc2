"""Async retry policy for provider calls.

``with_retry`` re-awaits an operation while the classifier reports the raised
error as retryable, sleeping between attempts with exponential backoff and
multiplicative jitter. A ``retry_after`` hint on the error replaces the
computed delay (still capped at ``max_interval``). Waits go through an
injectable awaitable ``sleep`` so the event loop is never blocked and tests
can record delays instead of waiting.

A policy with ``skip_backoff`` set (``A8E_PROVIDER_SKIP_BACKOFF`` through
:class:`~a8e_providers.config.Config`) keeps the attempt accounting but skips
the waits.
"""
from __future__ import annotations

import asyncio
import functools
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar

from ...config import ConfigError
from ...config.defaults import (
    RETRY_DEFAULT_BACKOFF_MULTIPLIER,
    RETRY_DEFAULT_INITIAL_INTERVAL_SECONDS,
    RETRY_DEFAULT_JITTER,
    RETRY_DEFAULT_MAX_ATTEMPTS,
    RETRY_DEFAULT_MAX_INTERVAL_SECONDS,
    RETRY_INITIAL_INTERVAL_PARAM,
    RETRY_MAX_ATTEMPTS_PARAM,
    RETRY_SKIP_BACKOFF_ENV,
)
from ..errors import ErrorCode, ProviderError, is_retryable
from ..log_support import LogContext
from ..logging import get_logger, normalized_log_event

T = TypeVar("T")

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: BaseException | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    """Backoff policy.

    Attributes:
        max_attempts: Total attempts including the first one (>= 1).
        initial_interval: Delay in seconds before the second attempt.
        multiplier: Growth factor applied per attempt.
        max_interval: Upper bound for any single wait.
        jitter: Fraction of the delay randomly added or removed (0 disables).
        attempt_logger: Optional hook invoked after every attempt.
        rng: Random source for jitter; seed it for reproducible delays.
        skip_backoff: Keep counting attempts but do not wait between them.
    """

    max_attempts: int = RETRY_DEFAULT_MAX_ATTEMPTS
    initial_interval: float = RETRY_DEFAULT_INITIAL_INTERVAL_SECONDS
    multiplier: float = RETRY_DEFAULT_BACKOFF_MULTIPLIER
    max_interval: float = RETRY_DEFAULT_MAX_INTERVAL_SECONDS
    jitter: float = RETRY_DEFAULT_JITTER
    attempt_logger: AttemptLogger | None = None
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)
    skip_backoff: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_interval < 0 or self.max_interval < 0:
            raise ValueError("retry intervals must be non-negative")
        if not 0 <= self.jitter < 1:
            raise ValueError("jitter must be in [0, 1)")

    @classmethod
    def from_config(cls, config: Any, **overrides: Any) -> "RetryConfig":
        """Build a policy from ``A8E_RETRY_*`` params, keeping defaults for unset keys."""
        values: dict[str, Any] = {}
        for param, attr, conv in (
            (RETRY_MAX_ATTEMPTS_PARAM, "max_attempts", int),
            (RETRY_INITIAL_INTERVAL_PARAM, "initial_interval", float),
            (RETRY_SKIP_BACKOFF_ENV, "skip_backoff", _flag),
        ):
            try:
                values[attr] = conv(config.get_param(param))
            except LookupError:
                continue
            except ConfigError as exc:
                raise ProviderError(code=ErrorCode.USAGE, message=str(exc)) from exc
            except (TypeError, ValueError) as exc:
                raise ProviderError(
                    code=ErrorCode.USAGE, message=f"invalid {param}: {exc}"
                ) from exc
        values.update(overrides)
        return cls(**values)

    def delay_for_attempt(self, attempt: int, error: BaseException | None = None) -> float:
        """Return the wait after the ``attempt``-th failure (0-based)."""
        retry_after = getattr(error, "retry_after", None)
        if isinstance(retry_after, (int, float)) and retry_after >= 0:
            return min(float(retry_after), self.max_interval)
        base = self.initial_interval * (self.multiplier**attempt)
        if self.jitter:
            base *= 1 + self.rng.uniform(-self.jitter, self.jitter)
        return max(0.0, min(base, self.max_interval))


DEFAULT_RETRY_CONFIG = RetryConfig()

_logger = get_logger("a8e.retry")
_sleep = asyncio.sleep


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    classifier: Callable[[BaseException], bool] = is_retryable,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ctx: Optional[LogContext] = None,
) -> T:
    """Await ``operation`` until it succeeds, fails fatally, or attempts run out.

    The exception from the final attempt is re-raised unchanged. ``sleep``
    defaults to :func:`asyncio.sleep`. Errors the classifier rejects
    propagate immediately without consuming further attempts. Cancellation is
    never retried.
    """
    attempt = 0
    while True:
        try:
            result = await operation()
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - classifier decides
            last_attempt = attempt + 1 >= config.max_attempts
            retryable = classifier(exc)
            delay = None if (last_attempt or not retryable) else config.delay_for_attempt(attempt, exc)
            if config.attempt_logger:
                config.attempt_logger(
                    attempt=attempt, max_attempts=config.max_attempts, delay=delay, error=exc
                )
            normalized_log_event(
                _logger,
                "retry.attempt",
                ctx,
                phase="retry",
                attempt=attempt + 1,
                error_code=getattr(getattr(exc, "code", None), "value", type(exc).__name__),
                emitted=False,
                level=logging.WARNING,
                delay=delay,
                max_attempts=config.max_attempts,
                will_retry=delay is not None,
            )
            if delay is None:
                raise
            if not config.skip_backoff:
                await (sleep or _sleep)(delay)
            attempt += 1
            continue
        if config.attempt_logger:
            config.attempt_logger(
                attempt=attempt, max_attempts=config.max_attempts, delay=None, error=None
            )
        return result


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG, **kwargs: Any):
    """Decorator form of :func:`with_retry` for coroutine functions.

    Extra keyword arguments (``classifier``, ``sleep``, ``ctx``) are forwarded.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **fkwargs) -> T:
            return await with_retry(lambda: func(*args, **fkwargs), config=config, **kwargs)

        return wrapper

    return decorator


__all__ = [
    "AttemptLogger",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "retry",
    "with_retry",
]
