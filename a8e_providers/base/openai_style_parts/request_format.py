"""Translate canonical conversations into OpenAI-compatible request bodies.

Purpose:
- Build the ``/v1/chat/completions`` payload from a :class:`ModelConfig`, a
  system prompt, the message history and tool specs.
- Produce byte-identical output for identical inputs: dict insertion order is
  fixed and tool-call arguments are JSON-encoded with sorted keys. Retries
  reuse the payload as-is.

Mapping rules:
- The system prompt is always the first message.
- Text parts become ``content``; a message with only text uses a plain
  string, otherwise a list of typed parts.
- Images become ``image_url`` data URLs (:attr:`ImageFormat.OPENAI`) or
  Anthropic-style ``image`` sources (:attr:`ImageFormat.ANTHROPIC`).
- Assistant tool calls become ``tool_calls``; tool results become
  ``role: tool`` messages. Images inside tool results cannot ride on a tool
  message, so they are moved into a follow-up user message.

Failure modes:
- ``ProviderError(USAGE)`` for duplicate tool names, invalid tool specs,
  unsupported roles or content kinds a role cannot carry.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from ..dto import ToolCall, ToolResult, ToolSpec
from ..errors import ErrorCode, ProviderError
from ..models import ContentPart, Message, ModelConfig


class ImageFormat(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


def _usage(message: str) -> ProviderError:
    return ProviderError(code=ErrorCode.USAGE, message=message)


def format_image(data: str, mime_type: str, image_format: ImageFormat) -> Dict[str, Any]:
    if image_format is ImageFormat.ANTHROPIC:
        return {"type": "image", "source": {"type": "base64", "media_type": mime_type, "data": data}}
    return {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{data}"}}


def encode_arguments(call: ToolCall) -> str:
    """JSON-encode tool-call arguments deterministically."""
    if call.error is not None and call.raw_arguments is not None:
        return call.raw_arguments
    return json.dumps(call.arguments, sort_keys=True, ensure_ascii=False)


def _image_part(part: ContentPart, image_format: ImageFormat) -> Dict[str, Any]:
    data = part.data or {}
    if not data.get("data") or not data.get("mime_type"):
        raise _usage("image part requires base64 data and a mime type")
    return format_image(data["data"], data["mime_type"], image_format)


def _content_value(items: List[Dict[str, Any]]) -> Any:
    """Collapse text-only content into a plain string."""
    if all(i["type"] == "text" for i in items):
        return "\n".join(i["text"] for i in items)
    return items


def _tool_result_messages(
    result: ToolResult, image_format: ImageFormat
) -> tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Return the tool message plus any image parts that must move out of it."""
    images: List[Dict[str, Any]] = []
    if result.error is not None:
        text = f"Error: {result.error}"
    else:
        texts: List[str] = []
        for item in result.content:
            if item.type == "text":
                texts.append(item.text or "")
            elif item.type == "image":
                if not item.data or not item.mime_type:
                    raise _usage(f"image output of tool call {result.tool_call_id} lacks data or mime type")
                images.append(format_image(item.data, item.mime_type, image_format))
            else:
                raise _usage(f"tool output of kind {item.type!r} is not supported")
        text = "\n".join(texts)
        if images and not text:
            text = "This tool result included an image that is uploaded in the next message."
    return {"role": "tool", "tool_call_id": result.tool_call_id, "content": text}, images


def _format_user(message: Message, image_format: ImageFormat) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    content: List[Dict[str, Any]] = []
    moved_images: List[Dict[str, Any]] = []
    for part in message.parts():
        if part.type == "text":
            content.append({"type": "text", "text": part.text or ""})
        elif part.type == "image":
            content.append(_image_part(part, image_format))
        elif part.type == "tool_result" and part.tool_result is not None:
            tool_msg, images = _tool_result_messages(part.tool_result, image_format)
            out.append(tool_msg)
            moved_images.extend(images)
        else:
            raise _usage(f"user messages cannot carry {part.type!r} content")
    if moved_images:
        out.append({"role": "user", "content": moved_images})
    if content:
        out.append({"role": "user", "content": _content_value(content)})
    return out


def _format_assistant(message: Message) -> List[Dict[str, Any]]:
    texts: List[str] = []
    calls: List[Dict[str, Any]] = []
    for part in message.parts():
        if part.type == "text":
            texts.append(part.text or "")
        elif part.type == "tool_call" and part.tool_call is not None:
            call = part.tool_call
            calls.append(
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": encode_arguments(call)},
                }
            )
        else:
            raise _usage(f"assistant messages cannot carry {part.type!r} content")
    msg: Dict[str, Any] = {"role": "assistant", "content": "\n".join(texts) if texts else None}
    if calls:
        msg["tool_calls"] = calls
    return [msg]


def format_messages(messages: Iterable[Message], image_format: ImageFormat) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for message in messages:
        if message.role == "user":
            out.extend(_format_user(message, image_format))
        elif message.role == "assistant":
            out.extend(_format_assistant(message))
        else:
            raise _usage(f"unsupported message role {message.role!r}")
    return out


def format_tools(tools: Sequence[ToolSpec | Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Map tool specs to ``{type: function, function: {...}}`` entries."""
    seen: set[str] = set()
    out: List[Dict[str, Any]] = []
    for tool in tools:
        try:
            spec = tool if isinstance(tool, ToolSpec) else ToolSpec.model_validate(tool)
        except ValidationError as exc:
            raise _usage(f"invalid tool definition: {exc.errors()[0].get('msg', exc)}") from exc
        if spec.name in seen:
            raise _usage(f"duplicate tool name: {spec.name}")
        seen.add(spec.name)
        out.append(
            {
                "type": "function",
                "function": {
                    "name": spec.name,
                    "description": spec.description or "",
                    "parameters": spec.input_schema,
                },
            }
        )
    return out


def create_request(
    model_config: ModelConfig,
    system: str,
    messages: Sequence[Message],
    tools: Sequence[ToolSpec | Mapping[str, Any]] = (),
    image_format: ImageFormat = ImageFormat.OPENAI,
    stream: bool = False,
) -> Dict[str, Any]:
    """Build the chat-completions payload.

    Returns:
        A fresh dictionary; callers may add transport-level keys (``user``)
        without affecting other requests.

    Raises:
        ProviderError: ``USAGE`` for inputs the wire format cannot express.
    """
    payload: Dict[str, Any] = {
        "model": model_config.model_name,
        "messages": [{"role": "system", "content": system}, *format_messages(messages, image_format)],
    }
    if tools:
        payload["tools"] = format_tools(tools)
    if model_config.temperature is not None:
        payload["temperature"] = model_config.temperature
    if model_config.max_tokens is not None:
        payload["max_tokens"] = model_config.max_tokens
    payload["stream"] = stream
    if stream:
        payload["stream_options"] = {"include_usage": True}
    return payload


def with_session_user(payload: Dict[str, Any], session_id: Optional[str]) -> Dict[str, Any]:
    """Return ``payload`` with ``user`` set to the session id when non-empty."""
    if not session_id:
        return payload
    return {**payload, "user": session_id}


__all__ = [
    "ImageFormat",
    "create_request",
    "encode_arguments",
    "format_image",
    "format_messages",
    "format_tools",
    "with_session_user",
]
