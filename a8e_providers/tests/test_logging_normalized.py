"""Focused tests for a8e_providers.base.logging.

Covers:
- _parse_level string parsing
- normalized_log_event emits required keys
- configure_logger attaches and removes a rotating file handler
- JsonFormatter hoists structured payloads
"""
from __future__ import annotations

import json
import logging

from a8e_providers.base.log_support import JsonFormatter, LogContext
from a8e_providers.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level("WARN") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_child_loggers_propagate_to_base(log_records):
    logger = get_logger("a8e.providers.test")
    log_event(logger, "custom.event", LogContext(provider="p", model="m"), extra_field=1, dropped=None)
    payload = log_records.events("custom.event")[0]
    assert payload == {"event": "custom.event", "provider": "p", "model": "m", "extra_field": 1}  # nosec B101


def test_normalized_log_event_emits_required_keys(log_records):
    logger = get_logger("a8e.providers.test")
    normalized_log_event(
        logger,
        "stream.end",
        LogContext(provider="p", model="m", extra={"region": "eu"}),
        phase="finalize",
        emitted=True,
        tokens={"prompt": 10, "completion": 5, "total": 15},
        phase_alias=None,
        metrics={"time_to_first_token_ms": 12.3},
    )
    payload = log_records.events("stream.end")[0]
    for key in REQUIRED_NORMALIZED_KEYS:
        if key == "error_code":
            assert key not in payload  # nosec B101
        else:
            assert key in payload  # nosec B101
    assert payload["region"] == "eu"  # nosec B101
    assert payload["metrics"]["time_to_first_token_ms"] == 12.3  # nosec B101
    assert "phase_alias" not in payload  # nosec B101


def test_json_formatter_hoists_payload():
    record = logging.LogRecord("a8e", logging.INFO, __file__, 1, json.dumps({"event": "x", "n": 1}), None, None)
    out = json.loads(JsonFormatter().format(record))
    assert out["event"] == "x" and out["n"] == 1 and out["level"] == "INFO"  # nosec B101


def test_configure_logger_file_handler(tmp_path):
    path = tmp_path / "logs" / "a8e.log"
    logger = configure_logger(level="DEBUG", file_path=str(path))
    try:
        log_event(logger, "file.event")
        for h in logger.handlers:
            h.flush()
        assert "file.event" in path.read_text(encoding="utf-8")  # nosec B101
    finally:
        configure_logger(level=logging.INFO, file_path=None)
    assert not any(getattr(h, "baseFilename", None) == str(path) for h in logger.handlers)  # nosec B101
