"""Lifecycle tests for the pull-based MessageStream."""
from __future__ import annotations

import asyncio
from typing import AsyncIterator, List

import pytest

from a8e_providers.base.errors import ErrorCode, ProviderError
from a8e_providers.base.models import Message
from a8e_providers.base.streaming import ChatStreamEvent, EventKind, MessageStream


def _text(delta: str) -> ChatStreamEvent:
    return ChatStreamEvent.text("p", "m", delta)


def _done(text: str = "") -> ChatStreamEvent:
    return ChatStreamEvent.completed("p", "m", Message.assistant(text))


class _Source:
    """Async source recording how far it was pulled and whether it was closed."""

    def __init__(self, events: List[ChatStreamEvent], *, block_after: int | None = None) -> None:
        self.events = events
        self.pulled = 0
        self.closed = False
        self.block_after = block_after

    async def gen(self) -> AsyncIterator[ChatStreamEvent]:
        try:
            for evt in self.events:
                if self.block_after is not None and self.pulled >= self.block_after:
                    await asyncio.Event().wait()
                self.pulled += 1
                yield evt
        finally:
            self.closed = True


def _stream(source: _Source, closes: list, finished: list) -> MessageStream:
    async def on_close() -> None:
        closes.append(True)

    return MessageStream(
        source.gen(), provider="p", model="m", on_close=on_close,
        on_finish=lambda evt, metrics: finished.append((evt, metrics)),
    )


@pytest.mark.asyncio
async def test_nothing_pulled_until_consumer_asks():
    source = _Source([_text("a"), _done("a")])
    stream = _stream(source, [], [])
    assert source.pulled == 0  # nosec B101
    first = await stream.__anext__()
    assert first.delta == "a" and source.pulled == 1  # nosec B101
    await stream.aclose()


@pytest.mark.asyncio
async def test_events_after_terminal_are_never_delivered():
    closes, finished = [], []
    source = _Source([_text("a"), _done("a"), _text("late")])
    events = [e async for e in _stream(source, closes, finished)]
    assert [e.kind for e in events] == [EventKind.TEXT_DELTA, EventKind.COMPLETED]  # nosec B101
    assert closes == [True] and source.closed  # nosec B101
    assert finished[0][0].kind is EventKind.COMPLETED  # nosec B101
    assert finished[0][1].emitted == 1  # nosec B101


@pytest.mark.asyncio
async def test_source_ending_without_terminal_synthesizes_failure():
    events = [e async for e in MessageStream.from_events([_text("a")], provider="p", model="m")]
    assert events[-1].kind is EventKind.FAILED  # nosec B101
    assert events[-1].error.code is ErrorCode.REQUEST_FAILED  # nosec B101


@pytest.mark.asyncio
async def test_source_exception_becomes_failed_event():
    async def gen():
        yield _text("a")
        raise ProviderError(code=ErrorCode.SERVER_ERROR, message="gone", provider="p")

    events = [e async for e in MessageStream(gen(), provider="p", model="m")]
    assert events[-1].kind is EventKind.FAILED and events[-1].error.message == "gone"  # nosec B101


@pytest.mark.asyncio
async def test_early_close_releases_response_and_reports_abandonment():
    closes, finished = [], []
    source = _Source([_text("a"), _text("b"), _done("ab")])
    async with _stream(source, closes, finished) as stream:
        async for evt in stream:
            assert evt.delta == "a"  # nosec B101
            break
    assert closes == [True] and source.closed  # nosec B101
    assert finished == [(None, finished[0][1])]  # nosec B101
    assert source.pulled == 1  # nosec B101
    assert [e async for e in stream] == []  # nosec B101


@pytest.mark.asyncio
async def test_task_cancellation_closes_stream():
    closes, finished = [], []
    source = _Source([_text("a"), _text("b"), _done("ab")], block_after=1)
    stream = _stream(source, closes, finished)

    async def consume():
        async for _ in stream:
            pass

    task = asyncio.create_task(consume())
    while source.pulled < 1:
        await asyncio.sleep(0)
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert closes == [True]  # nosec B101
    assert stream.finished  # nosec B101
    assert finished[0][0] is None  # nosec B101


@pytest.mark.asyncio
async def test_collect_returns_response_or_raises():
    ok = await MessageStream.from_events([_text("hi"), _done("hi")], provider="p", model="m").collect()
    assert ok.text == "hi" and ok.model == "m"  # nosec B101

    err = ProviderError(code=ErrorCode.RATE_LIMIT, message="later", provider="p")
    failing = MessageStream.from_events([ChatStreamEvent.failed("p", "m", err)], provider="p", model="m")
    with pytest.raises(ProviderError) as ei:
        await failing.collect()
    assert ei.value is err  # nosec B101
