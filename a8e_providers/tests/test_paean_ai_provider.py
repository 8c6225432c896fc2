"""End-to-end tests for the Paean AI adapter against a scripted backend."""
from __future__ import annotations

import dataclasses
import importlib
import json

import httpx
import pytest

from a8e_providers.base.errors import ErrorCode, ProviderError
from a8e_providers.base.interfaces import ModelListingProvider, SupportsStreaming
from a8e_providers.base.models import ConfigKey, ContentPart, Message, ModelConfig
from a8e_providers.base.streaming import EventKind
from a8e_providers.config import Config
from a8e_providers.paean_ai import PaeanAiProvider
from a8e_providers.tests.helpers import completion_body, sse_response, text_chunk, tool_chunk, usage_chunk

SECRET = "sk-test-secret-value"  # pragma: allowlist secret - matches the config fixture
retry_module = importlib.import_module("a8e_providers.base.resilience.retry")


async def _provider(config, backend, model: str = "opensota/os-v1") -> PaeanAiProvider:
    return await PaeanAiProvider.from_env(ModelConfig(model), config=config, transport=backend.transport)


class _Waits:
    def __init__(self) -> None:
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def test_metadata_declares_keys_and_defaults():
    meta = PaeanAiProvider.metadata()
    assert meta.name == "paean_ai" and meta.default_model == "opensota/os-v1"  # nosec B101
    assert meta.allows_unlisted_models  # nosec B101
    api_key = meta.config_key("PAEAN_AI_API_KEY")
    host = meta.config_key("PAEAN_AI_HOST")
    assert api_key.required and api_key.secret  # nosec B101
    assert not host.required and host.default == "https://api.paean.ai"  # nosec B101
    assert meta.redacted_keys() == ("PAEAN_AI_API_KEY",)  # nosec B101


@pytest.mark.asyncio
async def test_missing_api_key_is_auth_error(backend):
    with pytest.raises(ProviderError) as ei:
        await PaeanAiProvider.from_env(ModelConfig("opensota/os-v1"), config=Config(environ={}),
                                       transport=backend.transport)
    assert ei.value.code is ErrorCode.AUTH  # nosec B101
    assert backend.requests == []  # nosec B101


@pytest.mark.asyncio
async def test_fast_model_default_applied(config, backend):
    provider = await _provider(config, backend)
    assert provider.get_model_config().fast_model == "opensota/os-v1-flash"  # nosec B101


@pytest.mark.asyncio
async def test_fetch_supported_models_sorted_with_duplicates(config, backend):
    backend.add(httpx.Response(200, json={"data": [{"id": "b"}, {"id": "a"}, {"id": "b"}]}))
    provider = await _provider(config, backend)
    assert await provider.fetch_supported_models() == ["a", "b", "b"]  # nosec B101
    request = backend.requests[0]
    assert request.method == "GET"  # nosec B101
    assert str(request.url) == "https://api.paean.ai/v1/models"  # nosec B101
    assert request.headers["authorization"] == f"Bearer {SECRET}"  # nosec B101


@pytest.mark.asyncio
async def test_fetch_supported_models_custom_host(backend):
    cfg = Config(environ={"PAEAN_AI_API_KEY": SECRET, "PAEAN_AI_HOST": "http://localhost:9999/"})
    backend.add(httpx.Response(200, json={"data": []}))
    provider = await _provider(cfg, backend)
    assert await provider.fetch_supported_models() == []  # nosec B101
    assert str(backend.requests[0].url) == "http://localhost:9999/v1/models"  # nosec B101


@pytest.mark.asyncio
async def test_fetch_supported_models_malformed_error_body(config, backend, monkeypatch):
    waits = _Waits()
    monkeypatch.setattr(retry_module, "_sleep", waits)
    backend.add(httpx.Response(500, content=b"not json"))
    provider = await _provider(config, backend)
    with pytest.raises(ProviderError) as ei:
        await provider.fetch_supported_models()
    assert ei.value.code is ErrorCode.REQUEST_FAILED and ei.value.status == 500  # nosec B101
    assert len(backend.requests) == 1 and waits.delays == []  # nosec B101


@pytest.mark.asyncio
async def test_fetch_supported_models_missing_data_is_usage(config, backend):
    backend.add(httpx.Response(200, json={"object": "list"}))
    provider = await _provider(config, backend)
    with pytest.raises(ProviderError) as ei:
        await provider.fetch_supported_models()
    assert ei.value.code is ErrorCode.USAGE  # nosec B101


@pytest.mark.asyncio
async def test_fetch_supported_models_inline_error_envelope(config, backend):
    backend.add(httpx.Response(200, json={"error": {"message": "gateway unavailable"}}))
    provider = await _provider(config, backend)
    with pytest.raises(ProviderError) as ei:
        await provider.fetch_supported_models()
    assert ei.value.code is ErrorCode.REQUEST_FAILED  # nosec B101
    assert "gateway unavailable" in ei.value.message  # nosec B101


@pytest.mark.asyncio
async def test_json_completion_yields_single_completed_event(config, backend):
    backend.add(httpx.Response(200, json=completion_body("hello")))
    provider = await _provider(config, backend)
    stream = await provider.stream(provider.get_model_config(), "", "be brief", [Message.user("hi")])
    events = [e async for e in stream]
    assert [e.kind for e in events] == [EventKind.COMPLETED]  # nosec B101
    final = events[0]
    assert final.message.text_or_joined() == "hello"  # nosec B101
    assert final.usage.input_tokens == 5 and final.usage.output_tokens == 1  # nosec B101


@pytest.mark.asyncio
async def test_streaming_request_shape_and_events(config, backend, log_records):
    backend.add(sse_response(text_chunk("Hel"), text_chunk("lo"), usage_chunk(3, 2)))
    provider = await _provider(config, backend)
    stream = await provider.stream(provider.get_model_config(), "session-42", "sys", [Message.user("hi")])
    events = [e async for e in stream]

    kinds = [e.kind for e in events]
    assert kinds[:2] == [EventKind.TEXT_DELTA, EventKind.TEXT_DELTA]  # nosec B101
    assert kinds[-1] is EventKind.COMPLETED  # nosec B101
    assert "".join(e.delta for e in events if e.kind is EventKind.TEXT_DELTA) == "Hello"  # nosec B101
    assert events[-1].message.text_or_joined() == "Hello"  # nosec B101
    assert events[-1].usage.total_tokens == 5  # nosec B101

    request = backend.requests[0]
    assert request.method == "POST"  # nosec B101
    assert str(request.url) == "https://api.paean.ai/v1/chat/completions"  # nosec B101
    assert request.headers["x-session-id"] == "session-42"  # nosec B101
    body = json.loads(request.content)
    assert body["model"] == "opensota/os-v1" and body["stream"] is True  # nosec B101
    assert body["user"] == "session-42"  # nosec B101
    assert body["messages"][0] == {"role": "system", "content": "sys"}  # nosec B101

    assert SECRET not in log_records.text()  # nosec B101
    end = log_records.events("request.end")
    assert len(end) == 1 and end[0]["session_id"] == "session-42"  # nosec B101
    assert end[0]["tokens"]["total"] == 5  # nosec B101


@pytest.mark.asyncio
async def test_empty_session_id_sends_no_session_header_or_user(config, backend):
    backend.add(sse_response(text_chunk("x")))
    provider = await _provider(config, backend)
    stream = await provider.stream(provider.get_model_config(), "", "", [Message.user("hi")])
    await stream.collect()
    request = backend.requests[0]
    assert "x-session-id" not in request.headers  # nosec B101
    assert "user" not in json.loads(request.content)  # nosec B101


@pytest.mark.asyncio
async def test_streamed_tool_call_is_assembled(config, backend):
    backend.add(sse_response(
        tool_chunk(0, id="call_1", name="lookup", arguments='{"q": '),
        tool_chunk(0, arguments='"weather"}'),
    ))
    provider = await _provider(config, backend)
    stream = await provider.stream(provider.get_model_config(), "s", "", [Message.user("weather?")],
                                   tools=[{"name": "lookup", "description": "Look up",
                                           "input_schema": {"type": "object", "properties": {"q": {"type": "string"}}}}])
    response = await stream.collect()
    calls = response.message.tool_calls()
    assert len(calls) == 1 and calls[0].name == "lookup"  # nosec B101
    assert calls[0].arguments == {"q": "weather"}  # nosec B101
    body = json.loads(backend.requests[0].content)
    assert body["tools"][0]["function"]["name"] == "lookup"  # nosec B101


@pytest.mark.asyncio
async def test_rate_limited_twice_then_success(config, backend, monkeypatch, log_records):
    waits = _Waits()
    monkeypatch.setattr(retry_module, "_sleep", waits)
    limited = {"error": {"message": "slow down", "type": "rate_limit"}}
    backend.add(httpx.Response(429, json=limited))
    backend.add(httpx.Response(429, json=limited))
    backend.add(sse_response(text_chunk("ok")))
    provider = await _provider(config, backend)

    stream = await provider.stream(provider.get_model_config(), "s", "", [Message.user("hi")])
    response = await stream.collect()

    assert response.text == "ok"  # nosec B101
    assert len(backend.requests) == 3  # nosec B101
    assert len(waits.delays) == 2 and all(d > 0 for d in waits.delays)  # nosec B101
    attempts = log_records.events("retry.attempt")
    assert [a["attempt"] for a in attempts] == [1, 2]  # nosec B101
    assert all(a["error_code"] == "rate_limit" for a in attempts)  # nosec B101


@pytest.mark.asyncio
async def test_unauthorized_is_not_retried(config, backend, monkeypatch, log_records):
    waits = _Waits()
    monkeypatch.setattr(retry_module, "_sleep", waits)
    backend.add(httpx.Response(401, json={"error": {"message": "invalid api key"}}))
    provider = await _provider(config, backend)
    with pytest.raises(ProviderError) as ei:
        await provider.stream(provider.get_model_config(), "s", "", [Message.user("hi")])
    assert ei.value.code is ErrorCode.AUTH and ei.value.status == 401  # nosec B101
    assert len(backend.requests) == 1 and waits.delays == []  # nosec B101
    errors = log_records.events("request.error")
    assert len(errors) == 1 and errors[0]["error_code"] == "auth"  # nosec B101


@pytest.mark.asyncio
async def test_server_errors_exhaust_attempts(config, backend, monkeypatch):
    waits = _Waits()
    monkeypatch.setattr(retry_module, "_sleep", waits)
    for _ in range(4):
        backend.add(httpx.Response(503, json={"error": {"message": "overloaded"}}))
    provider = await _provider(config, backend)
    with pytest.raises(ProviderError) as ei:
        await provider.complete(provider.get_model_config(), "", "", [Message.user("hi")])
    assert ei.value.code is ErrorCode.SERVER_ERROR  # nosec B101
    assert len(backend.requests) == 4 and len(waits.delays) == 3  # nosec B101


@pytest.mark.asyncio
async def test_unsupported_content_fails_before_network(config, backend):
    provider = await _provider(config, backend)
    with pytest.raises(ProviderError) as ei:
        await provider.stream(provider.get_model_config(), "", "",
                              [Message.user([ContentPart(type="other", text="?")])])
    assert ei.value.code is ErrorCode.USAGE  # nosec B101
    assert backend.requests == []  # nosec B101


@pytest.mark.asyncio
async def test_complete_fast_targets_flash_model(config, backend):
    backend.add(httpx.Response(200, json=completion_body("quick", model="opensota/os-v1-flash")))
    provider = await _provider(config, backend)
    response = await provider.complete_fast("", "", [Message.user("hi")])
    body = json.loads(backend.requests[0].content)
    assert body["model"] == "opensota/os-v1-flash" and body["stream"] is False  # nosec B101
    assert response.text == "quick" and response.model == "opensota/os-v1-flash"  # nosec B101


@pytest.mark.asyncio
async def test_early_close_is_logged_as_cancelled(config, backend, log_records):
    backend.add(sse_response(text_chunk("a"), text_chunk("b"), text_chunk("c")))
    provider = await _provider(config, backend)
    async with await provider.stream(provider.get_model_config(), "", "", [Message.user("hi")]) as stream:
        async for evt in stream:
            assert evt.kind is EventKind.TEXT_DELTA  # nosec B101
            break
    errors = log_records.events("request.error")
    assert len(errors) == 1 and errors[0]["error_code"] == "cancelled"  # nosec B101
    assert log_records.events("request.end") == []  # nosec B101


@pytest.mark.asyncio
async def test_provider_context_manager_closes_client(config, backend):
    backend.add(httpx.Response(200, json={"data": [{"id": "m"}]}))
    async with await _provider(config, backend) as provider:
        await provider.fetch_supported_models()
        http = provider.api_client.http()
    assert http.is_closed  # nosec B101
    assert SECRET not in repr(provider)  # nosec B101


@pytest.mark.asyncio
async def test_provider_satisfies_capability_protocols(config, backend):
    provider = await _provider(config, backend)
    assert isinstance(provider, ModelListingProvider)  # nosec B101
    assert isinstance(provider, SupportsStreaming) and provider.supports_streaming()  # nosec B101


class _NonStreamingPaean(PaeanAiProvider):
    @classmethod
    def metadata(cls):
        return dataclasses.replace(PaeanAiProvider.metadata(), supports_streaming=False)


@pytest.mark.asyncio
async def test_non_streaming_backend_answers_stream_with_single_event(config, backend):
    backend.add(httpx.Response(200, json=completion_body("whole")))
    provider = await _NonStreamingPaean.from_env(ModelConfig("opensota/os-v1"), config=config,
                                                 transport=backend.transport)
    stream = await provider.stream(provider.get_model_config(), "", "", [Message.user("hi")])
    events = [e async for e in stream]
    assert [e.kind for e in events] == [EventKind.COMPLETED]  # nosec B101
    assert json.loads(backend.requests[0].content)["stream"] is False  # nosec B101


@pytest.mark.asyncio
async def test_json_completion_without_content_type_is_not_dropped(config, backend):
    body = {"choices": [{"message": {"role": "assistant", "content": "hello"}}]}
    backend.add(httpx.Response(200, content=json.dumps(body).encode()))
    provider = await _provider(config, backend)
    stream = await provider.stream(provider.get_model_config(), "", "", [Message.user("hi")])
    events = [e async for e in stream]
    assert [e.kind for e in events] == [EventKind.COMPLETED]  # nosec B101
    assert events[0].message.text_or_joined() == "hello"  # nosec B101


ORG_ID = "org-private-7f3a9c"  # pragma: allowlist secret - test fixture


class _OrgScopedPaean(PaeanAiProvider):
    @classmethod
    def metadata(cls):
        base = PaeanAiProvider.metadata()
        org = ConfigKey("PAEAN_AI_ORG", required=True, secret=False, sensitive=True)
        return dataclasses.replace(base, config_keys=base.config_keys + (org,))


@pytest.mark.asyncio
async def test_sensitive_config_values_are_scrubbed_from_logs(backend, log_records):
    config = Config(environ={"PAEAN_AI_API_KEY": SECRET, "PAEAN_AI_ORG": ORG_ID})
    backend.add(httpx.Response(200, json=completion_body("ok")))
    provider = await _OrgScopedPaean.from_env(ModelConfig("opensota/os-v1"), config=config,
                                              transport=backend.transport)
    stream = await provider.stream(provider.get_model_config(), "", f"You act for {ORG_ID}.",
                                   [Message.user(f"which org is {ORG_ID}?")])
    events = [e async for e in stream]
    assert events[-1].kind is EventKind.COMPLETED  # nosec B101
    assert ORG_ID in backend.requests[0].content.decode()  # nosec B101
    assert log_records.events("request.start")  # nosec B101
    assert ORG_ID not in log_records.text()  # nosec B101
    assert SECRET not in log_records.text()  # nosec B101
