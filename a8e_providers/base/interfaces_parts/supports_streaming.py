"""SupportsStreaming Protocol (single-class module).

Capability marker for providers that can stream incremental deltas.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from ..models import Message, ModelConfig
from ..streaming import MessageStream


@runtime_checkable
class SupportsStreaming(Protocol):
    """Capability marker for providers that can stream incremental deltas.

    Implementations return a :class:`MessageStream` that yields zero or more
    delta events then exactly one terminal event (``COMPLETED`` or
    ``FAILED``).
    """

    def supports_streaming(self) -> bool:  # pragma: no cover - trivial
        """Return True if the provider streams natively."""
        return True

    async def stream(
        self,
        model_config: ModelConfig,
        session_id: str,
        system: str,
        messages: Sequence[Message],
        tools: Sequence[Any] = (),
    ) -> MessageStream:  # pragma: no cover - interface
        """Stream chat responses as incremental events."""
        ...
