"""Pull-based wrapper that enforces the stream terminal contract.

``MessageStream`` adapts an async iterator of :class:`ChatStreamEvent` into
the object handed to callers:

- Nothing is read from the network until the consumer asks for an event.
- Exactly one terminal event (``COMPLETED`` or ``FAILED``) is delivered, and
  iteration stops right after it. A source that ends without one yields a
  synthesized ``FAILED`` event; a source that raises yields ``FAILED`` with
  the classified error.
- ``aclose()``, leaving ``async with``, or cancelling the consuming task
  closes the source and releases the HTTP response. The stream is never
  restarted.
"""
from __future__ import annotations

import asyncio
import contextlib
from typing import AsyncIterator, Awaitable, Callable, Optional

from ..errors import ErrorCode, ProviderError, transport_error
from .streaming import ChatStreamEvent, EventKind, ProviderResponse
from .streaming_metrics import StreamMetrics

OnFinish = Callable[[Optional[ChatStreamEvent], StreamMetrics], None]


class MessageStream:
    """Single-use async iterator of provider events."""

    def __init__(
        self,
        source: AsyncIterator[ChatStreamEvent],
        *,
        provider: str,
        model: str,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
        on_finish: Optional[OnFinish] = None,
    ) -> None:
        self._source = source
        self.provider = provider
        self.model = model
        self._on_close = on_close
        self._on_finish = on_finish
        self.metrics = StreamMetrics()
        self._done = False
        self._released = False

    @classmethod
    def from_events(cls, events, *, provider: str, model: str) -> "MessageStream":
        """Wrap an in-memory sequence of events (fixtures, non-streaming replies)."""

        async def _gen() -> AsyncIterator[ChatStreamEvent]:
            for evt in events:
                yield evt

        return cls(_gen(), provider=provider, model=model)

    @property
    def finished(self) -> bool:
        return self._done

    def __aiter__(self) -> "MessageStream":
        return self

    async def __anext__(self) -> ChatStreamEvent:
        if self._done:
            raise StopAsyncIteration
        try:
            evt = await self._source.__anext__()
        except StopAsyncIteration:
            evt = self._failure(
                ProviderError(
                    code=ErrorCode.REQUEST_FAILED,
                    message="stream ended without a terminal event",
                    provider=self.provider,
                    model=self.model,
                )
            )
        except asyncio.CancelledError:
            await self._abandon()
            raise
        except ProviderError as exc:
            evt = self._failure(exc)
        except Exception as exc:  # noqa: BLE001 - surfaced as a FAILED event
            evt = self._failure(transport_error(exc, provider=self.provider, model=self.model))

        if not evt.is_terminal:
            if evt.kind in (EventKind.TEXT_DELTA, EventKind.TOOL_CALL_DELTA):
                self.metrics.record_delta()
            elif evt.kind is EventKind.USAGE:
                self.metrics.emitted += 1
                self.metrics.record_usage(evt.usage)
            return evt

        self._done = True
        if evt.kind is EventKind.COMPLETED:
            self.metrics.record_usage(evt.usage)
        self.metrics.finish()
        await self._release()
        self._notify(evt)
        return evt

    def _failure(self, error: ProviderError) -> ChatStreamEvent:
        return ChatStreamEvent.failed(self.provider, self.model, error)

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            with contextlib.suppress(Exception):
                await aclose()
        if self._on_close is not None:
            with contextlib.suppress(Exception):
                await self._on_close()

    def _notify(self, evt: Optional[ChatStreamEvent]) -> None:
        if self._on_finish is None:
            return
        callback, self._on_finish = self._on_finish, None
        with contextlib.suppress(Exception):
            callback(evt, self.metrics)

    async def _abandon(self) -> None:
        if self._done:
            return
        self._done = True
        self.metrics.finish()
        await self._release()
        self._notify(None)

    async def aclose(self) -> None:
        """Stop early and release the underlying response. Idempotent."""
        await self._abandon()

    async def __aenter__(self) -> "MessageStream":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def collect(self) -> ProviderResponse:
        """Drain the stream and return the completed message.

        Raises:
            ProviderError: The error carried by a ``FAILED`` terminal event.
        """
        async with self:
            async for evt in self:
                if evt.kind is EventKind.FAILED and evt.error is not None:
                    raise evt.error
                if evt.kind is EventKind.COMPLETED and evt.message is not None:
                    return ProviderResponse(message=evt.message, usage=evt.usage, model=evt.model)
        raise ProviderError(
            code=ErrorCode.REQUEST_FAILED,
            message="stream closed before completion",
            provider=self.provider,
            model=self.model,
        )


__all__ = ["MessageStream"]
