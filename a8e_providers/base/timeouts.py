"""Timeout configuration for provider transports.

Centralizes the timeout values used by :class:`~a8e_providers.base.http.client.ApiClient`
so no call site carries an ad-hoc numeric literal.

Environment overrides (all optional, seconds, must be positive):
    A8E_TIMEOUT_CONNECT_SECONDS
    A8E_TIMEOUT_READ_SECONDS    idle gap allowed between streamed chunks
    A8E_TIMEOUT_WRITE_SECONDS
    A8E_TIMEOUT_POOL_SECONDS

The parsed configuration is cached per process and refreshed when any of the
variables above changes, which keeps tests that monkeypatch the environment
deterministic.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

CONNECT_ENV = "A8E_TIMEOUT_CONNECT_SECONDS"
READ_ENV = "A8E_TIMEOUT_READ_SECONDS"
WRITE_ENV = "A8E_TIMEOUT_WRITE_SECONDS"
POOL_ENV = "A8E_TIMEOUT_POOL_SECONDS"
_ENV_NAMES = (CONNECT_ENV, READ_ENV, WRITE_ENV, POOL_ENV)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_seconds: Time allowed to establish the TCP/TLS connection.
        read_seconds: Maximum wait for the next chunk of a response. For
            streamed completions this is the idle timeout between deltas.
        write_seconds: Time allowed to send the request body.
        pool_seconds: Time allowed to acquire a pooled connection.
    """

    connect_seconds: float = 10.0
    read_seconds: float = 600.0
    write_seconds: float = 30.0
    pool_seconds: float = 10.0

    def to_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_seconds,
            read=self.read_seconds,
            write=self.write_seconds,
            pool=self.pool_seconds,
        )


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_seconds=_parse_env_float(CONNECT_ENV, defaults.connect_seconds),
        read_seconds=_parse_env_float(READ_ENV, defaults.read_seconds),
        write_seconds=_parse_env_float(WRITE_ENV, defaults.write_seconds),
        pool_seconds=_parse_env_float(POOL_ENV, defaults.pool_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
