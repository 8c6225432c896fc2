"""DTO describing a tool call requested by a model.

This DTO captures the minimal information needed to represent a function call
that a model wants to execute: the call id, the function name and a JSON-like
arguments mapping.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ToolCall(BaseModel):
    """Represents a function-style tool invocation from a model.

    Parameters
    ----------
    id:
        Backend-assigned call identifier; tool results reference it.
    name:
        The function/tool name suggested by the model.
    arguments:
        JSON-like arguments payload. Defaults to an empty mapping.
    error:
        Set when the streamed arguments could not be parsed as a JSON object.
        ``arguments`` is then empty and ``raw_arguments`` keeps the text.
    raw_arguments:
        The argument text exactly as the backend sent it, when available.

    Notes
    -----
    - Side effects: None. Pure data container.
    - Exceptions: Validation errors can be raised by Pydantic if types mismatch.
    """

    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None
    raw_arguments: Optional[str] = None


__all__ = ["ToolCall"]
