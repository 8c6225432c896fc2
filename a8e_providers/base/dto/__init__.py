"""Pydantic DTOs for tools exchanged with providers."""

from .tool_call import ToolCall
from .tool_result import ToolResult, ToolResultContent
from .tool_spec import ToolSpec

__all__ = [
    "ToolCall",
    "ToolResult",
    "ToolResultContent",
    "ToolSpec",
]
