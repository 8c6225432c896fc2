"""Streaming primitives for provider layer.

Keeps streaming concerns separate from core request/response DTOs. A provider
call yields :class:`ChatStreamEvent` values of five kinds; exactly one of
``COMPLETED`` or ``FAILED`` ends every stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..errors import ProviderError
from ..models import Message, Usage


class EventKind(str, Enum):
    TEXT_DELTA = "text_delta"
    TOOL_CALL_DELTA = "tool_call_delta"
    USAGE = "usage"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_KINDS = frozenset((EventKind.COMPLETED, EventKind.FAILED))


@dataclass(frozen=True)
class ToolCallDelta:
    """Fragment of a streamed tool call.

    ``index`` identifies the call within the assistant turn; ``id`` and
    ``name`` usually arrive only on the first fragment while ``arguments``
    carries a slice of the JSON argument text.
    """

    index: int
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: str = ""


@dataclass(frozen=True)
class ChatStreamEvent:
    """Represents one event from a provider stream.

    Fields:
      kind: event discriminator
      provider: canonical provider name
      model: model id reported by the backend (or requested)
      delta: text fragment for ``TEXT_DELTA``
      tool_call: fragment for ``TOOL_CALL_DELTA``
      usage: token accounting for ``USAGE`` and ``COMPLETED``
      message: accumulated assistant message on ``COMPLETED``
      error: failure on ``FAILED``
      raw: decoded backend chunk (debugging only)
    """

    kind: EventKind
    provider: str
    model: str
    delta: Optional[str] = None
    tool_call: Optional[ToolCallDelta] = None
    usage: Optional[Usage] = None
    message: Optional[Message] = None
    error: Optional[ProviderError] = None
    raw: Any = None

    @property
    def is_terminal(self) -> bool:
        return self.kind in TERMINAL_KINDS

    @classmethod
    def text(cls, provider: str, model: str, delta: str, raw: Any = None) -> "ChatStreamEvent":
        return cls(EventKind.TEXT_DELTA, provider, model, delta=delta, raw=raw)

    @classmethod
    def tool_call_delta(cls, provider: str, model: str, fragment: ToolCallDelta, raw: Any = None) -> "ChatStreamEvent":
        return cls(EventKind.TOOL_CALL_DELTA, provider, model, tool_call=fragment, raw=raw)

    @classmethod
    def usage_event(cls, provider: str, model: str, usage: Usage, raw: Any = None) -> "ChatStreamEvent":
        return cls(EventKind.USAGE, provider, model, usage=usage, raw=raw)

    @classmethod
    def completed(
        cls, provider: str, model: str, message: Message, usage: Optional[Usage] = None
    ) -> "ChatStreamEvent":
        return cls(EventKind.COMPLETED, provider, model, message=message, usage=usage or Usage())

    @classmethod
    def failed(cls, provider: str, model: str, error: ProviderError) -> "ChatStreamEvent":
        return cls(EventKind.FAILED, provider, model, error=error)


@dataclass(frozen=True)
class ProviderResponse:
    """Result of a completed (collected) provider call."""

    message: Message
    usage: Usage
    model: str

    @property
    def text(self) -> str:
        return "".join(p.text or "" for p in self.message.parts() if p.type == "text")


__all__ = [
    "EventKind",
    "TERMINAL_KINDS",
    "ToolCallDelta",
    "ChatStreamEvent",
    "ProviderResponse",
]
