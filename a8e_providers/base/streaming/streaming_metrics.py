"""Streaming metrics data structures.

Isolated within the streaming package to keep orchestration code small and cohesive.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..models import Usage


@dataclass
class StreamMetrics:
    """Collected streaming metrics for a single provider invocation.

    ``emitted`` counts non-terminal events handed to the consumer;
    ``time_to_first_token_ms`` is measured from construction to the first
    text or tool-call delta.
    """

    emitted: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    tokens: Optional[Dict[str, Any]] = None
    started_at: float = field(default_factory=time.perf_counter, repr=False)

    def _elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000.0

    def record_delta(self) -> None:
        self.emitted += 1
        if self.time_to_first_token_ms is None:
            self.time_to_first_token_ms = self._elapsed_ms()

    def record_usage(self, usage: Optional[Usage]) -> None:
        if usage is not None and not usage.is_empty():
            self.tokens = usage.to_dict()

    def finish(self) -> None:
        if self.total_duration_ms is None:
            self.total_duration_ms = self._elapsed_ms()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "emitted": self.emitted,
            "time_to_first_token_ms": self.time_to_first_token_ms,
            "total_duration_ms": self.total_duration_ms,
            "tokens": self.tokens,
        }


__all__ = ["StreamMetrics"]
