"""Decode OpenAI-compatible responses into canonical stream events.

Two entry points produce async generators of :class:`ChatStreamEvent`:

``decode_sse_lines``
    Consumes server-sent-event lines (``data: {...}`` events separated by
    blank lines and terminated by ``data: [DONE]``). A body that is a bare
    JSON document despite its content type is decoded as one. Text deltas,
    tool-call fragments and usage reports are yielded as they arrive; the
    assistant message is accumulated and carried by the final ``COMPLETED``
    event.

``decode_json_document``
    Handles a complete (non-streaming) chat-completions body and yields a
    single ``COMPLETED`` event, or ``FAILED``.

Every generator ends with exactly one terminal event. Malformed chunks
(invalid JSON, wrong shape, lines that are not SSE fields) fail with
``USAGE``; inline error envelopes and transport errors while reading fail
with ``REQUEST_FAILED``. A clean end of input without ``[DONE]`` completes normally.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ..dto import ToolCall
from ..errors import ErrorCode, ProviderError, transport_error
from ..models import ContentPart, Message, Usage
from ..streaming import ChatStreamEvent, MessageStream, ToolCallDelta
from .status import error_message_from_body

DONE_SENTINEL = "[DONE]"


@dataclass
class DecodeContext:
    provider: str
    model: str


@dataclass
class _PendingToolCall:
    id: Optional[str] = None
    name: Optional[str] = None
    arguments: List[str] = field(default_factory=list)

    def finalize(self, index: int) -> ToolCall:
        raw = "".join(self.arguments)
        call_id = self.id or f"call_{index}"
        name = self.name or ""
        if not raw.strip():
            return ToolCall(id=call_id, name=name, arguments={})
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            return ToolCall(id=call_id, name=name, error=f"invalid tool arguments: {exc}", raw_arguments=raw)
        if not isinstance(parsed, dict):
            return ToolCall(id=call_id, name=name, error="tool arguments must be a JSON object", raw_arguments=raw)
        return ToolCall(id=call_id, name=name, arguments=parsed, raw_arguments=raw)


class _Accumulator:
    """Collects deltas into the final assistant message."""

    def __init__(self, ctx: DecodeContext) -> None:
        self.ctx = ctx
        self.model = ctx.model
        self.text: List[str] = []
        self.tools: Dict[int, _PendingToolCall] = {}
        self.usage: Optional[Usage] = None

    def error(self, code: ErrorCode, message: str) -> ProviderError:
        return ProviderError(code=code, message=message, provider=self.ctx.provider, model=self.model)

    def failed(self, error: ProviderError) -> ChatStreamEvent:
        return ChatStreamEvent.failed(self.ctx.provider, self.model, error)

    def completed(self) -> ChatStreamEvent:
        parts: List[ContentPart] = []
        text = "".join(self.text)
        if text:
            parts.append(ContentPart.text_part(text))
        for index in sorted(self.tools):
            parts.append(ContentPart.tool_call_part(self.tools[index].finalize(index)))
        return ChatStreamEvent.completed(
            self.ctx.provider, self.model, Message.assistant(parts), self.usage or Usage()
        )

    def chunk_events(self, chunk: Any) -> List[ChatStreamEvent]:
        """Translate one decoded chunk; raises ``ProviderError`` on bad input."""
        if not isinstance(chunk, dict):
            raise self.error(ErrorCode.USAGE, "stream chunk is not a JSON object")
        if "error" in chunk:
            message = error_message_from_body(chunk) or "backend reported an error mid-stream"
            raise self.error(ErrorCode.REQUEST_FAILED, message)
        if isinstance(chunk.get("model"), str) and chunk["model"]:
            self.model = chunk["model"]
        choices = chunk.get("choices", [])
        if not isinstance(choices, list):
            raise self.error(ErrorCode.USAGE, "stream chunk 'choices' must be a list")

        events: List[ChatStreamEvent] = []
        for choice in choices:
            if not isinstance(choice, dict):
                raise self.error(ErrorCode.USAGE, "stream choice must be a JSON object")
            delta = choice.get("delta")
            if delta is None:
                delta = choice.get("message") or {}
            if not isinstance(delta, dict):
                raise self.error(ErrorCode.USAGE, "stream delta must be a JSON object")
            events.extend(self._delta_events(delta, chunk))

        usage = chunk.get("usage")
        if isinstance(usage, dict):
            self.usage = Usage.from_openai(usage)
            events.append(ChatStreamEvent.usage_event(self.ctx.provider, self.model, self.usage, raw=chunk))
        return events

    def _delta_events(self, delta: Dict[str, Any], chunk: Any) -> List[ChatStreamEvent]:
        events: List[ChatStreamEvent] = []
        content = delta.get("content")
        if content is not None and not isinstance(content, str):
            raise self.error(ErrorCode.USAGE, "delta content must be a string")
        if content:
            self.text.append(content)
            events.append(ChatStreamEvent.text(self.ctx.provider, self.model, content, raw=chunk))
        tool_calls = delta.get("tool_calls") or []
        if not isinstance(tool_calls, list):
            raise self.error(ErrorCode.USAGE, "delta tool_calls must be a list")
        for position, tc in enumerate(tool_calls):
            if not isinstance(tc, dict):
                raise self.error(ErrorCode.USAGE, "tool call delta must be a JSON object")
            index = tc.get("index", position)
            if not isinstance(index, int) or isinstance(index, bool):
                raise self.error(ErrorCode.USAGE, "tool call index must be an integer")
            fn = tc.get("function") or {}
            if not isinstance(fn, dict):
                raise self.error(ErrorCode.USAGE, "tool call function must be a JSON object")
            args = fn.get("arguments") or ""
            if isinstance(args, dict):
                args = json.dumps(args, sort_keys=True)
            if not isinstance(args, str):
                raise self.error(ErrorCode.USAGE, "tool call arguments must be a string")
            pending = self.tools.setdefault(index, _PendingToolCall())
            if isinstance(tc.get("id"), str) and tc["id"]:
                pending.id = tc["id"]
            if isinstance(fn.get("name"), str) and fn["name"]:
                pending.name = fn["name"]
            pending.arguments.append(args)
            fragment = ToolCallDelta(index=index, id=tc.get("id"), name=fn.get("name"), arguments=args)
            events.append(ChatStreamEvent.tool_call_delta(self.ctx.provider, self.model, fragment, raw=chunk))
        return events


_IGNORED_FIELDS = frozenset(("event", "id", "retry"))


def _sse_field(line: str) -> Optional[tuple[str, str]]:
    """Split an SSE line into ``(field, value)``; ``None`` for blank or comment lines."""
    if not line or line.startswith(":"):
        return None
    name, sep, value = line.partition(":")
    if sep and value.startswith(" "):
        value = value[1:]
    return name, value


def _looks_like_document(line: str) -> bool:
    return line.lstrip().startswith(("{", "["))


class _SseDecoder:
    """Buffers ``data:`` lines into events and turns each event into stream events."""

    def __init__(self, ctx: DecodeContext) -> None:
        self.acc = _Accumulator(ctx)
        self.buffer: List[str] = []
        self.frames = 0
        self.terminal: Optional[ChatStreamEvent] = None

    def dispatch(self) -> List[ChatStreamEvent]:
        """Decode the buffered event; sets ``terminal`` when the stream ends."""
        if not self.buffer:
            return []
        data = "\n".join(self.buffer).strip()
        self.buffer = []
        self.frames += 1
        if not data:
            return []
        if data == DONE_SENTINEL:
            self.terminal = self.acc.completed()
            return []
        try:
            chunk = json.loads(data)
        except ValueError:
            self.terminal = self.acc.failed(self.acc.error(ErrorCode.USAGE, f"malformed stream chunk: {data[:200]}"))
            return []
        try:
            return self.acc.chunk_events(chunk)
        except ProviderError as exc:
            self.terminal = self.acc.failed(exc)
            return []


async def decode_sse_lines(lines: AsyncIterator[str], ctx: DecodeContext) -> AsyncIterator[ChatStreamEvent]:
    """Decode SSE lines into events ending with exactly one terminal event.

    ``data:`` lines accumulate until a blank line closes the event and are
    joined with newlines. A body that starts with a JSON value instead of SSE
    framing is decoded as a complete document. Lines that are neither fields
    nor comments fail the stream with ``USAGE``.
    """
    decoder = _SseDecoder(ctx)
    acc = decoder.acc
    try:
        iterator = lines.__aiter__()
        async for raw in iterator:
            line = raw.rstrip("\r\n")
            if not line:
                events = decoder.dispatch()
            elif decoder.frames == 0 and not decoder.buffer and _looks_like_document(line):
                body = [line]
                async for rest in iterator:
                    body.append(rest)
                async for evt in decode_json_document("\n".join(body), ctx):
                    yield evt
                return
            else:
                field_ = _sse_field(line)
                events = []
                if field_ is not None:
                    name, value = field_
                    if name == "data":
                        decoder.buffer.append(value)
                    elif name not in _IGNORED_FIELDS:
                        yield acc.failed(acc.error(ErrorCode.USAGE, f"malformed stream line: {line[:200]}"))
                        return
            for evt in events:
                yield evt
            if decoder.terminal is not None:
                yield decoder.terminal
                return
        for evt in decoder.dispatch():
            yield evt
        if decoder.terminal is not None:
            yield decoder.terminal
            return
    except ProviderError as exc:
        yield acc.failed(exc)
        return
    except (httpx.HTTPError, httpx.StreamError) as exc:
        yield acc.failed(transport_error(exc, provider=ctx.provider, model=acc.model))
        return
    yield acc.completed()


async def decode_json_document(data: Any, ctx: DecodeContext) -> AsyncIterator[ChatStreamEvent]:
    """Decode a complete chat-completions body into a single terminal event."""
    acc = _Accumulator(ctx)
    if isinstance(data, (bytes, bytearray, str)):
        try:
            data = json.loads(data)
        except ValueError:
            yield acc.failed(acc.error(ErrorCode.REQUEST_FAILED, "response body is not valid JSON"))
            return
    try:
        if isinstance(data, dict) and not isinstance(data.get("choices"), list) and "error" not in data:
            raise acc.error(ErrorCode.USAGE, "response is missing 'choices'")
        acc.chunk_events(data)
    except ProviderError as exc:
        yield acc.failed(exc)
        return
    yield acc.completed()


def _is_json_response(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "")
    return content_type.split(";")[0].strip().lower() == "application/json"


async def _response_events(response: httpx.Response, ctx: DecodeContext) -> AsyncIterator[ChatStreamEvent]:
    if _is_json_response(response):
        try:
            body = await response.aread()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            yield ChatStreamEvent.failed(ctx.provider, ctx.model, transport_error(exc, provider=ctx.provider, model=ctx.model))
            return
        async for evt in decode_json_document(body, ctx):
            yield evt
        return
    async for evt in decode_sse_lines(response.aiter_lines(), ctx):
        yield evt


def stream_from_response(
    response: httpx.Response,
    ctx: DecodeContext,
    *,
    on_finish=None,
) -> MessageStream:
    """Wrap an open streamed response in a :class:`MessageStream`.

    The response is closed when the stream reaches its terminal event or the
    consumer closes it early.
    """
    return MessageStream(
        _response_events(response, ctx),
        provider=ctx.provider,
        model=ctx.model,
        on_close=response.aclose,
        on_finish=on_finish,
    )


__all__ = [
    "DONE_SENTINEL",
    "DecodeContext",
    "decode_sse_lines",
    "decode_json_document",
    "stream_from_response",
]
