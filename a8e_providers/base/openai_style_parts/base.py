"""OpenAICompatProvider: shared implementation for OpenAI-compatible backends.

Purpose:
- Provide a reusable base class for providers exposing ``/v1/models`` and
  ``/v1/chat/completions`` with OpenAI wire semantics. Concrete backends
  declare :meth:`metadata` and the names of their API-key and host config
  keys; everything else is inherited.

Request flow (``stream``):
    translate -> inject session ``user`` -> open :class:`RequestLog` ->
    POST inside the retry wrapper -> :func:`handle_status` -> wrap the open
    response in a :class:`MessageStream`.

Failure semantics:
- Translation errors raise ``USAGE`` before any network I/O.
- Transport and status errors are retried per :meth:`retry_config`; the last
  error is logged on the request log and re-raised.
- Decode failures after the response opened surface as a ``FAILED`` event.

Timeout strategy:
- Timeouts are owned by :class:`ApiClient` (see ``base.timeouts``).
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx

from ...config import Config
from ..errors import ErrorCode, ProviderError
from ..http import ApiClient, AuthMethod, BearerToken, NoAuth
from ..interfaces import Provider, Tools
from ..log_support import LogContext
from ..logging import get_logger, normalized_log_event
from ..models import Message, ModelConfig
from ..request_log import RequestLog
from ..resilience.retry import RetryConfig
from ..streaming import ChatStreamEvent, EventKind, MessageStream, ProviderResponse, StreamMetrics
from .request_format import ImageFormat, create_request, with_session_user
from .status import error_message_from_body, handle_status
from .stream_decode import DecodeContext, decode_json_document, stream_from_response

CHAT_COMPLETIONS_PATH = "v1/chat/completions"
MODELS_PATH = "v1/models"


class OpenAICompatProvider(Provider):
    """Reusable base class for OpenAI-compatible providers.

    Subclasses must implement:
    - ``metadata()``: static provider description.

    They may set ``API_KEY_CONFIG`` / ``HOST_CONFIG`` (config key names),
    ``DEFAULT_HOST``,
    ``IMAGE_FORMAT``, and override :meth:`build_auth` or
    :meth:`prepare_model_config` when the backend differs.
    """

    API_KEY_CONFIG: Optional[str] = None
    HOST_CONFIG: Optional[str] = None
    DEFAULT_HOST: Optional[str] = None
    IMAGE_FORMAT: ImageFormat = ImageFormat.OPENAI

    def __init__(
        self,
        *,
        api_client: ApiClient,
        model_config: ModelConfig,
        extensions: Sequence[Any] = (),
        retry_config: Optional[RetryConfig] = None,
        redacted_values: Sequence[str] = (),
    ) -> None:
        self._api = api_client
        self._model = model_config
        self._extensions = tuple(extensions)
        self._retry = retry_config or RetryConfig()
        self._redacted_values = tuple(v for v in redacted_values if v)
        self._logger = get_logger(f"a8e.providers.{self.get_name()}")

    # ----- construction -----

    @classmethod
    async def from_env(
        cls,
        model_config: ModelConfig,
        extensions: Sequence[Any] = (),
        *,
        config: Any = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "OpenAICompatProvider":
        meta = cls.metadata()
        config = config if config is not None else Config.global_config()
        resolved: Dict[str, Optional[str]] = {
            key.name: key.resolve(config, provider=meta.name) for key in meta.config_keys
        }
        host = (resolved.get(cls.HOST_CONFIG) if cls.HOST_CONFIG else None) or cls.DEFAULT_HOST
        if not host:
            raise ProviderError(code=ErrorCode.USAGE, message="no host configured", provider=meta.name)
        api_client = ApiClient(
            host,
            cls.build_auth(resolved),
            provider=meta.name,
            transport=transport,
        )
        return cls(
            api_client=api_client,
            model_config=cls.prepare_model_config(model_config),
            extensions=extensions,
            retry_config=RetryConfig.from_config(config),
            redacted_values=tuple(resolved[k] for k in meta.redacted_keys() if resolved.get(k)),
        )

    @classmethod
    def build_auth(cls, resolved: Mapping[str, Optional[str]]) -> AuthMethod:
        if not cls.API_KEY_CONFIG:
            return NoAuth()
        return BearerToken(resolved.get(cls.API_KEY_CONFIG) or "")

    @classmethod
    def prepare_model_config(cls, model_config: ModelConfig) -> ModelConfig:
        return model_config

    # ----- accessors -----

    def get_model_config(self) -> ModelConfig:
        return self._model

    @property
    def api_client(self) -> ApiClient:
        return self._api

    @property
    def extensions(self) -> tuple:
        return self._extensions

    def retry_config(self) -> RetryConfig:
        return self._retry

    def _secrets(self) -> tuple:
        return tuple(self._api.auth.secret_values()) + self._redacted_values

    # ----- operations -----

    async def fetch_supported_models(self) -> List[str]:
        """GET ``v1/models`` and return the ids sorted, duplicates preserved.

        Raises:
            ProviderError: ``REQUEST_FAILED`` for error statuses, non-JSON
                bodies or an inline error envelope; ``USAGE`` when the
                ``data`` array is missing.
        """
        name = self.get_name()
        ctx = LogContext(provider=name, model=self._model.model_name)
        response = await self._api.request("", MODELS_PATH).response_get()
        await handle_status(response, provider=name, model=self._model.model_name)
        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderError(
                code=ErrorCode.REQUEST_FAILED,
                message=f"failed to parse model list as JSON: {exc}",
                provider=name,
                status=response.status_code,
            ) from exc
        if isinstance(body, dict) and "error" in body:
            raise ProviderError(
                code=ErrorCode.REQUEST_FAILED,
                message=f"model listing returned an error: {error_message_from_body(body) or 'unknown error'}",
                provider=name,
                status=response.status_code,
            )
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            raise ProviderError(
                code=ErrorCode.USAGE,
                message="missing data field in model list response",
                provider=name,
            )
        models = sorted(m["id"] for m in data if isinstance(m, dict) and isinstance(m.get("id"), str))
        normalized_log_event(self._logger, "models.fetch", ctx, phase="models", emitted=True, count=len(models))
        return models

    async def _send(self, payload: Dict[str, Any], session_id: str, model: str, *, stream: bool) -> httpx.Response:
        response = await self._api.request(session_id, CHAT_COMPLETIONS_PATH).response_post(payload, stream=stream)
        return await handle_status(response, provider=self.get_name(), model=model)

    async def _open(
        self, model_config: ModelConfig, session_id: str, system: str,
        messages: Sequence[Message], tools: Tools, *, stream: bool,
    ) -> tuple[httpx.Response, RequestLog]:
        payload = with_session_user(
            create_request(model_config, system, messages, tools, self.IMAGE_FORMAT, stream), session_id
        )
        model = model_config.model_name
        log = RequestLog.start(
            provider=self.get_name(), model=model, payload=payload,
            secrets=self._secrets(), session_id=session_id, logger=self._logger,
        )
        try:
            response = await self.with_retry(
                lambda: self._send(payload, session_id, model, stream=stream), ctx=log.ctx
            )
        except asyncio.CancelledError:
            log.error(ProviderError(code=ErrorCode.CANCELLED, message="request cancelled",
                                    provider=self.get_name(), model=model))
            raise
        except ProviderError as exc:
            log.error(exc)
            raise
        return response, log

    @staticmethod
    def _finisher(log: RequestLog):
        def _on_finish(evt: Optional[ChatStreamEvent], metrics: StreamMetrics) -> None:
            if evt is None:
                log.error(
                    ProviderError(code=ErrorCode.CANCELLED, message="stream closed by consumer",
                                  provider=log.ctx.provider or "unknown", model=log.ctx.model),
                    metrics=metrics,
                )
            elif evt.kind is EventKind.FAILED and evt.error is not None:
                log.error(evt.error, metrics=metrics)
            else:
                log.finish(usage=evt.usage, metrics=metrics, model=evt.model)

        return _on_finish

    async def stream(
        self,
        model_config: ModelConfig,
        session_id: str,
        system: str,
        messages: Sequence[Message],
        tools: Tools = (),
    ) -> MessageStream:
        if not self.supports_streaming():
            return await self._document_stream(model_config, session_id, system, messages, tools)
        response, log = await self._open(model_config, session_id, system, messages, tools, stream=True)
        ctx = DecodeContext(provider=self.get_name(), model=model_config.model_name)
        return stream_from_response(response, ctx, on_finish=self._finisher(log))

    async def _document_stream(
        self, model_config: ModelConfig, session_id: str, system: str,
        messages: Sequence[Message], tools: Tools,
    ) -> MessageStream:
        response, log = await self._open(model_config, session_id, system, messages, tools, stream=False)
        ctx = DecodeContext(provider=self.get_name(), model=model_config.model_name)
        return MessageStream(
            decode_json_document(response.content, ctx),
            provider=ctx.provider,
            model=ctx.model,
            on_close=response.aclose,
            on_finish=self._finisher(log),
        )

    async def complete(
        self,
        model_config: ModelConfig,
        session_id: str,
        system: str,
        messages: Sequence[Message],
        tools: Tools = (),
    ) -> ProviderResponse:
        stream = await self._document_stream(model_config, session_id, system, messages, tools)
        return await stream.collect()

    async def aclose(self) -> None:
        await self._api.aclose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self._model.model_name!r}, api={self._api!r})"



__all__ = ["OpenAICompatProvider", "CHAT_COMPLETIONS_PATH", "MODELS_PATH"]
