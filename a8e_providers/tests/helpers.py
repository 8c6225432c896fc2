"""Fixture payload builders shared by provider tests."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx


def sse_body(*chunks: Any, done: bool = True) -> bytes:
    """Encode chunks as a ``text/event-stream`` body."""
    lines = [f"data: {json.dumps(c)}\n\n" for c in chunks]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


def sse_response(*chunks: Any, done: bool = True, status: int = 200) -> httpx.Response:
    return httpx.Response(
        status,
        headers={"content-type": "text/event-stream"},
        content=sse_body(*chunks, done=done),
    )


def completion_body(
    text: str, *, model: str = "opensota/os-v1", usage: Optional[Dict[str, int]] = None
) -> Dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "model": model,
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
        "usage": usage or {"prompt_tokens": 5, "completion_tokens": 1, "total_tokens": 6},
    }


def text_chunk(text: str, *, model: str = "opensota/os-v1") -> Dict[str, Any]:
    return {"model": model, "choices": [{"index": 0, "delta": {"content": text}}]}


def usage_chunk(prompt: int, completion: int, *, model: str = "opensota/os-v1") -> Dict[str, Any]:
    return {
        "model": model,
        "choices": [],
        "usage": {"prompt_tokens": prompt, "completion_tokens": completion, "total_tokens": prompt + completion},
    }


def tool_chunk(index: int, *, id: Optional[str] = None, name: Optional[str] = None, arguments: str = "") -> Dict[str, Any]:
    fn: Dict[str, Any] = {"arguments": arguments}
    if name is not None:
        fn["name"] = name
    call: Dict[str, Any] = {"index": index, "function": fn}
    if id is not None:
        call["id"] = id
        call["type"] = "function"
    return {"model": "opensota/os-v1", "choices": [{"index": 0, "delta": {"tool_calls": [call]}}]}
