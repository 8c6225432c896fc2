"""Provider ABC (single-class module).

Defines the closed contract every backend implements. Callers obtain
instances through :class:`~a8e_providers.base.factory.ProviderRegistry`,
never by calling constructors directly, so that required configuration is
resolved before an instance exists.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence, TypeVar, Union

import httpx

from ..dto import ToolSpec
from ..models import Message, ModelConfig, ProviderMetadata
from ..resilience.retry import DEFAULT_RETRY_CONFIG, RetryConfig, with_retry
from ..streaming import MessageStream, ProviderResponse

T = TypeVar("T")
Tools = Sequence[Union[ToolSpec, Mapping[str, Any]]]


class Provider(ABC):
    """Base class for LLM backends.

    Subclasses provide static :meth:`metadata`, an async :meth:`from_env`
    constructor and the request operations. Shared behavior (name lookup,
    fast-model completion, retry wrapping, async context management) lives
    here.
    """

    @classmethod
    @abstractmethod
    def metadata(cls) -> ProviderMetadata:
        """Static description of the backend and its configuration keys."""

    @classmethod
    @abstractmethod
    async def from_env(
        cls,
        model_config: ModelConfig,
        extensions: Sequence[Any] = (),
        *,
        config: Any = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Provider":
        """Resolve configuration and return a ready provider.

        Raises:
            ProviderError: ``AUTH`` for a missing secret, ``USAGE`` for any
                other unresolved required key.
        """

    def get_name(self) -> str:
        return self.metadata().name

    @abstractmethod
    def get_model_config(self) -> ModelConfig:
        """Return the model descriptor this instance was built with."""

    @abstractmethod
    async def fetch_supported_models(self) -> List[str]:
        """Return backend model ids, sorted, duplicates preserved."""

    @abstractmethod
    async def stream(
        self,
        model_config: ModelConfig,
        session_id: str,
        system: str,
        messages: Sequence[Message],
        tools: Tools = (),
    ) -> MessageStream:
        """Issue a streaming completion and return the open event stream."""

    @abstractmethod
    async def complete(
        self,
        model_config: ModelConfig,
        session_id: str,
        system: str,
        messages: Sequence[Message],
        tools: Tools = (),
    ) -> ProviderResponse:
        """Issue a non-streaming completion and return the final message."""

    async def complete_fast(
        self,
        session_id: str,
        system: str,
        messages: Sequence[Message],
        tools: Tools = (),
    ) -> ProviderResponse:
        """Run :meth:`complete` against the configured fast model."""
        return await self.complete(
            self.get_model_config().use_fast_model(), session_id, system, messages, tools
        )

    def supports_streaming(self) -> bool:
        return self.metadata().supports_streaming

    def retry_config(self) -> RetryConfig:
        return DEFAULT_RETRY_CONFIG

    async def with_retry(self, operation: Callable[[], Awaitable[T]], **kwargs: Any) -> T:
        return await with_retry(operation, config=self.retry_config(), **kwargs)

    async def aclose(self) -> None:
        """Release transport resources. Idempotent."""
        return None

    async def __aenter__(self) -> "Provider":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["Provider", "Tools"]
