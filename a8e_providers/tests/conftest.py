"""Pytest configuration for the providers test suite.

Provides:
- environment isolation for ``A8E_*`` / ``PAEAN_AI_*`` variables;
- an in-memory :class:`Config` fixture;
- ``log_records``: captures JSON payloads emitted under the ``a8e`` logger;
- ``backend``: an ``httpx.MockTransport`` fixture backend scripted per test.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, Iterator, List

import httpx
import pytest

from a8e_providers.base.logging import BASE_LOGGER_NAME, get_logger
from a8e_providers.config import Config

_ISOLATED_PREFIXES = ("A8E_", "PAEAN_AI_")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Remove ambient configuration so tests never read a developer's setup."""
    for key in list(os.environ):
        if key.startswith(_ISOLATED_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("A8E_CONFIG_DIR", str(tmp_path / "a8e-config"))
    yield


@pytest.fixture()
def config() -> Config:
    """Config backed only by an in-memory environment mapping."""
    return Config(environ={"PAEAN_AI_API_KEY": "sk-test-secret-value"})


class _ListHandler(logging.Handler):
    """Capture log messages into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - exercised via tests
        self.messages.append(record.getMessage())


class LogCapture:
    def __init__(self, handler: _ListHandler) -> None:
        self._handler = handler

    @property
    def messages(self) -> List[str]:
        return self._handler.messages

    def text(self) -> str:
        return "\n".join(self._handler.messages)

    def events(self, name: str | None = None) -> List[Dict[str, Any]]:
        out = []
        for m in self._handler.messages:
            try:
                payload = json.loads(m)
            except ValueError:
                continue
            if name is None or payload.get("event") == name:
                out.append(payload)
        return out


@pytest.fixture()
def log_records() -> Iterator[LogCapture]:
    logger = get_logger(BASE_LOGGER_NAME)
    handler = _ListHandler()
    logger.addHandler(handler)
    previous = logger.level
    logger.setLevel(logging.DEBUG)
    try:
        yield LogCapture(handler)
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)


class FixtureBackend:
    """Scripted HTTP backend: each request pops the next responder."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responders: List[Callable[[httpx.Request], httpx.Response]] = []

    def add(self, responder: Callable[[httpx.Request], httpx.Response] | httpx.Response) -> "FixtureBackend":
        if isinstance(responder, httpx.Response):
            response = responder
            self._responders.append(lambda _req: response)
        else:
            self._responders.append(responder)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responders:
            return httpx.Response(500, json={"error": {"message": "no scripted response"}})
        return self._responders.pop(0)(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def json_bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture()
def backend() -> FixtureBackend:
    return FixtureBackend()
