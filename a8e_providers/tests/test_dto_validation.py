"""Tests for the tool DTOs (definition, call, result)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from a8e_providers.base.dto import ToolCall, ToolResult, ToolResultContent, ToolSpec


def test_tool_spec_defaults_to_empty_object_schema():
    spec = ToolSpec(name="lookup")
    assert spec.input_schema == {"type": "object", "properties": {}}  # nosec B101
    assert spec.description is None  # nosec B101


def test_tool_spec_rejects_empty_name_and_bad_schema():
    with pytest.raises(ValidationError):
        ToolSpec(name="")
    with pytest.raises(ValidationError):
        ToolSpec(name="x", input_schema="not a mapping")


def test_tool_spec_is_frozen():
    spec = ToolSpec(name="lookup")
    with pytest.raises(ValidationError):
        spec.name = "other"


def test_tool_call_defaults():
    call = ToolCall(id="c1", name="f")
    assert call.arguments == {} and call.error is None and call.raw_arguments is None  # nosec B101


def test_tool_result_ok_and_content_kinds():
    ok = ToolResult(tool_call_id="c1", content=[ToolResultContent(type="text", text="42")])
    assert ok.ok  # nosec B101
    failed = ToolResult(tool_call_id="c1", error="boom")
    assert not failed.ok  # nosec B101
    with pytest.raises(ValidationError):
        ToolResult(tool_call_id="")
    with pytest.raises(ValidationError):
        ToolResultContent(type="video")
