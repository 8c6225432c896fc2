"""Streaming package for provider layer.

Exposes stream events, the pull-based ``MessageStream`` and metrics under a
single namespace.
"""

from .message_stream import MessageStream
from .streaming import (
    TERMINAL_KINDS,
    ChatStreamEvent,
    EventKind,
    ProviderResponse,
    ToolCallDelta,
)
from .streaming_metrics import StreamMetrics

__all__ = [
    "ChatStreamEvent",
    "EventKind",
    "TERMINAL_KINDS",
    "ToolCallDelta",
    "ProviderResponse",
    "MessageStream",
    "StreamMetrics",
]
