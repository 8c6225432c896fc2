"""Tool result DTOs returned to the model after tool execution.

Tool execution happens outside this package; callers hand results back as a
``ToolResult`` inside a user message so the translator can map them to the
backend's tool-message shape.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ToolResultContent(BaseModel):
    """One item of tool output.

    Attributes:
        type: ``"text"`` or ``"image"``; ``"resource"`` items are accepted
            here but are not representable on OpenAI-compatible backends.
        text: Text output for ``"text"`` items.
        data: Base64 payload for ``"image"`` items.
        mime_type: MIME type for ``"image"`` items.
    """

    type: Literal["text", "image", "resource"]
    text: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = None


class ToolResult(BaseModel):
    """Result envelope for a tool invocation.

    Attributes:
        tool_call_id: Identifier of the ``ToolCall`` this result answers.
        content: Ordered output items.
        error: Human-readable error when the tool failed; sent to the model in
            place of ``content``.
    """

    tool_call_id: str = Field(..., min_length=1)
    content: List[ToolResultContent] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


__all__ = ["ToolResult", "ToolResultContent"]
