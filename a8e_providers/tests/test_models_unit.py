"""Unit tests for the canonical model types."""
from __future__ import annotations

import pytest

from a8e_providers.base.dto import ToolCall
from a8e_providers.base.errors import ErrorCode, ProviderError
from a8e_providers.base.models import (
    DEFAULT_CONTEXT_LIMIT,
    ConfigKey,
    ContentPart,
    Message,
    ModelConfig,
    Usage,
)
from a8e_providers.config import Config


@pytest.mark.parametrize(
    "kwargs",
    [
        {"model_name": ""},
        {"model_name": "  "},
        {"model_name": "m", "temperature": 2.5},
        {"model_name": "m", "temperature": -0.1},
        {"model_name": "m", "max_tokens": 0},
        {"model_name": "m", "context_limit": -1},
    ],
)
def test_model_config_rejects_invalid_settings(kwargs):
    with pytest.raises(ProviderError) as ei:
        ModelConfig(**kwargs)
    assert ei.value.code is ErrorCode.USAGE  # nosec B101


def test_model_config_defaults_and_fast_model():
    mc = ModelConfig("opensota/os-v1")
    assert mc.effective_context_limit() == DEFAULT_CONTEXT_LIMIT  # nosec B101
    assert mc.use_fast_model() is mc  # nosec B101
    fast = mc.with_fast("opensota/os-v1-flash")
    assert fast.use_fast_model().model_name == "opensota/os-v1-flash"  # nosec B101
    assert fast.with_fast("other").fast_model == "opensota/os-v1-flash"  # nosec B101
    assert mc.fast_model is None  # nosec B101


def test_model_config_from_config_reads_overrides():
    cfg = Config(environ={"A8E_TEMPERATURE": "0.3", "A8E_MAX_TOKENS": "256"})
    mc = ModelConfig.from_config("m", cfg)
    assert mc.temperature == 0.3 and mc.max_tokens == 256 and mc.context_limit is None  # nosec B101

    with pytest.raises(ProviderError) as ei:
        ModelConfig.from_config("m", Config(environ={"A8E_MAX_TOKENS": "lots"}))
    assert ei.value.code is ErrorCode.USAGE  # nosec B101


def test_config_key_resolution():
    cfg = Config(environ={"PRESENT": "v"})
    assert ConfigKey("PRESENT", required=True, secret=False).resolve(cfg) == "v"  # nosec B101
    assert ConfigKey("ABSENT", required=False, secret=False, default="d").resolve(cfg) == "d"  # nosec B101
    assert ConfigKey("ABSENT", required=False, secret=False).resolve(cfg) is None  # nosec B101

    with pytest.raises(ProviderError) as secret_err:
        ConfigKey("ABSENT", required=True, secret=True).resolve(cfg, provider="p")
    assert secret_err.value.code is ErrorCode.AUTH and secret_err.value.provider == "p"  # nosec B101
    with pytest.raises(ProviderError) as param_err:
        ConfigKey("ABSENT", required=True, secret=False).resolve(cfg)
    assert param_err.value.code is ErrorCode.USAGE  # nosec B101


def test_unreadable_secrets_file_is_usage_not_auth(tmp_path):
    (tmp_path / "secrets.yaml").write_text("PAEAN_AI_API_KEY: [unterminated\n", encoding="utf-8")
    cfg = Config.in_dir(tmp_path, environ={})
    with pytest.raises(ProviderError) as ei:
        ConfigKey("PAEAN_AI_API_KEY", required=True, secret=True).resolve(cfg, provider="paean_ai")
    assert ei.value.code is ErrorCode.USAGE  # nosec B101
    assert "failed to parse" in ei.value.message  # nosec B101


def test_empty_config_value_falls_back_to_default():
    cfg = Config(environ={"HOST": ""})
    assert ConfigKey("HOST", required=False, secret=False, default="https://x").resolve(cfg) == "https://x"  # nosec B101


def test_usage_from_openai():
    usage = Usage.from_openai({"prompt_tokens": 4, "completion_tokens": 6})
    assert usage.total_tokens == 10  # nosec B101
    assert Usage.from_openai(None).is_empty()  # nosec B101
    odd = Usage.from_openai({"prompt_tokens": -1, "completion_tokens": "x", "total_tokens": True})
    assert odd.is_empty()  # nosec B101
    assert usage.to_dict() == {"prompt": 4, "completion": 6, "total": 10}  # nosec B101


def test_message_helpers():
    call = ToolCall(id="c1", name="lookup", arguments={"q": 1})
    msg = Message.assistant([ContentPart.text_part("thinking"), ContentPart.tool_call_part(call)])
    assert msg.is_structured()  # nosec B101
    assert msg.text_or_joined() == "thinking\n[tool_call]"  # nosec B101
    assert msg.tool_calls() == [call]  # nosec B101

    plain = Message.user("hi")
    assert plain.parts() == (ContentPart.text_part("hi"),)  # nosec B101
    assert not plain.is_structured()  # nosec B101


def test_message_content_is_frozen():
    parts = [ContentPart.text_part("a")]
    msg = Message(role="user", content=parts)
    parts.append(ContentPart.text_part("b"))
    assert len(msg.content) == 1  # nosec B101
