"""Async HTTP transport shared by provider implementations.

Purpose:
    ``ApiClient`` owns one lazily created ``httpx.AsyncClient`` bound to a
    provider host and an :class:`~a8e_providers.base.http.auth.AuthMethod`.
    Provider code never builds absolute URLs or auth headers itself; it asks
    for ``request(session_id, path)`` and issues ``response_get`` /
    ``response_post`` on the returned builder.

Timeout strategy:
    Timeouts derive from :func:`get_timeout_config` unless an explicit
    ``httpx.Timeout`` is supplied. The read timeout doubles as the idle gap
    allowed between streamed chunks.

Error semantics:
    Transport failures (connect, read, protocol, timeout) are converted into
    ``ProviderError`` via :func:`transport_error` and marked retryable. Non-2xx
    responses are returned untouched; status classification belongs to the
    caller.

Lifecycle:
    Call :meth:`ApiClient.aclose` (or use ``async with``) to release pooled
    connections. Streamed responses returned with ``stream=True`` are owned by
    the caller and must be closed with ``await response.aclose()``.

Headers are never logged.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx

from ..errors import transport_error
from ..timeouts import get_timeout_config
from .auth import AuthMethod, NoAuth

SESSION_ID_HEADER = "x-session-id"


class ApiRequestBuilder:
    """A single request against ``path`` carrying auth and session headers."""

    def __init__(self, client: "ApiClient", session_id: str, path: str) -> None:
        self._client = client
        self._session_id = session_id
        self._path = path.lstrip("/")

    @property
    def path(self) -> str:
        return self._path

    def headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        headers.update(self._client.extra_headers)
        self._client.auth.apply(headers)
        if self._session_id:
            headers[SESSION_ID_HEADER] = self._session_id
        return headers

    async def response_get(self) -> httpx.Response:
        return await self._client.send(self._build("GET"))

    async def response_post(self, payload: Mapping[str, Any], stream: bool = False) -> httpx.Response:
        """POST ``payload`` as JSON.

        With ``stream=True`` the body is left unread so the caller can iterate
        it incrementally; the caller then owns closing the response.
        """
        return await self._client.send(self._build("POST", payload), stream=stream)

    def _build(self, method: str, payload: Optional[Mapping[str, Any]] = None) -> httpx.Request:
        http = self._client.http()
        if payload is None:
            return http.build_request(method, self._path, headers=self.headers())
        return http.build_request(method, self._path, headers=self.headers(), json=dict(payload))


class ApiClient:
    """Configured transport for one provider host."""

    def __init__(
        self,
        host: str,
        auth: Optional[AuthMethod] = None,
        *,
        provider: str = "unknown",
        timeout: Optional[httpx.Timeout] = None,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.host = host.rstrip("/") + "/"
        self.auth = auth or NoAuth()
        self.provider = provider
        self.extra_headers: Dict[str, str] = dict(headers or {})
        self._timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    def http(self) -> httpx.AsyncClient:
        """Return the underlying client, creating it on first use."""
        if self._http is None or self._http.is_closed:
            timeout = self._timeout or get_timeout_config().to_httpx()
            self._http = httpx.AsyncClient(base_url=self.host, timeout=timeout, transport=self._transport)
        return self._http

    def request(self, session_id: str, path: str) -> ApiRequestBuilder:
        return ApiRequestBuilder(self, session_id, path)

    async def response_get(self, session_id: str, path: str) -> httpx.Response:
        return await self.request(session_id, path).response_get()

    async def response_post(
        self,
        session_id: str,
        path: str,
        payload: Mapping[str, Any],
        stream: bool = False,
    ) -> httpx.Response:
        return await self.request(session_id, path).response_post(payload, stream=stream)

    async def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        try:
            return await self.http().send(request, stream=stream)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise transport_error(exc, provider=self.provider) from exc

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"ApiClient(host={self.host!r}, provider={self.provider!r}, auth={type(self.auth).__name__})"


__all__ = ["ApiClient", "ApiRequestBuilder", "SESSION_ID_HEADER"]
