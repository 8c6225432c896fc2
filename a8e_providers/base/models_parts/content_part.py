"""
Structured content part model for canonical messages.

This module defines the `ContentPart` dataclass and its associated
`ContentPartType` literal. A message is an ordered list of parts: plain
text, inline images, tool calls requested by the assistant, and tool results
returned by the caller. Request translators map each kind to the backend's
wire shape and reject kinds they cannot represent.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from ..dto.tool_call import ToolCall
from ..dto.tool_result import ToolResult


# Known content part types.
ContentPartType = Literal[
    "text",          # Plain text content
    "image",         # Inline image (base64 ``data`` + ``mime_type``)
    "tool_call",     # Tool call requested by the assistant
    "tool_result",   # Tool output returned by the caller
    "other",         # Catch-all; not representable on the wire
]


@dataclass(frozen=True)
class ContentPart:
    """A single piece of message content.

    Attributes:
        type: The semantic kind of the content part.
        text: Textual content for ``"text"`` parts.
        data: Payload for non-text parts; images use
            ``{"data": <base64>, "mime_type": <str>}``.
        tool_call: The call descriptor for ``"tool_call"`` parts.
        tool_result: The result envelope for ``"tool_result"`` parts.
    """

    type: ContentPartType
    text: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    tool_call: Optional[ToolCall] = None
    tool_result: Optional[ToolResult] = None

    @classmethod
    def text_part(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def image_part(cls, data: str, mime_type: str) -> "ContentPart":
        return cls(type="image", data={"data": data, "mime_type": mime_type})

    @classmethod
    def tool_call_part(cls, call: ToolCall) -> "ContentPart":
        return cls(type="tool_call", tool_call=call)

    @classmethod
    def tool_result_part(cls, result: ToolResult) -> "ContentPart":
        return cls(type="tool_result", tool_result=result)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation of the part."""
        out: Dict[str, Any] = {"type": self.type}
        if self.text is not None:
            out["text"] = self.text
        if self.data is not None:
            out["data"] = dict(self.data)
        if self.tool_call is not None:
            out["tool_call"] = self.tool_call.model_dump()
        if self.tool_result is not None:
            out["tool_result"] = self.tool_result.model_dump()
        return out


__all__ = [
    "ContentPart",
    "ContentPartType",
]
