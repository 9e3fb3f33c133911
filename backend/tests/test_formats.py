"""
Tests for the provider format adapters (tools and messages).
"""

import pytest

from conftest import CALCULATOR_TOOL
from errors import ValidationError
from models import Message, ToolDescriptor
from providers import formats


class TestToolFormats:
    """Tool descriptor -> provider declaration."""

    def test_gemini_renames_schema_to_parameters(self):
        """inputSchema becomes parameters; name/description kept."""
        decls = formats.tools_to_gemini([CALCULATOR_TOOL])
        assert decls == [{
            "name": "calculator",
            "description": "Evaluate an arithmetic expression",
            "parameters": CALCULATOR_TOOL["inputSchema"],
        }]

    def test_gemini_strips_unsupported_schema_keys(self):
        """JSON Schema keys Gemini rejects are removed at every depth."""
        tool = {
            "name": "lookup",
            "inputSchema": {
                "$schema": "http://json-schema.org/draft-07/schema#",
                "type": "object",
                "additionalProperties": False,
                "properties": {"q": {"type": "object", "additionalProperties": True}},
            },
        }
        params = formats.tools_to_gemini([tool])[0]["parameters"]
        assert params == {"type": "object", "properties": {"q": {"type": "object"}}}

    def test_gemini_without_schema(self):
        """Tools without a schema declare no parameters."""
        decls = formats.tools_to_gemini([{"name": "ping"}])
        assert decls == [{"name": "ping", "description": ""}]

    def test_claude_uses_input_schema(self):
        decls = formats.tools_to_claude([CALCULATOR_TOOL])
        assert decls[0]["input_schema"] == CALCULATOR_TOOL["inputSchema"]
        assert "inputSchema" not in decls[0]

    def test_claude_defaults_empty_object_schema(self):
        """Anthropic requires input_schema, so schemaless tools get an empty object."""
        decls = formats.tools_to_claude([ToolDescriptor(name="ping")])
        assert decls[0]["input_schema"] == {"type": "object", "properties": {}}

    def test_openai_nests_under_function(self):
        decls = formats.tools_to_openai([CALCULATOR_TOOL])
        assert decls == [{
            "type": "function",
            "function": {
                "name": "calculator",
                "description": "Evaluate an arithmetic expression",
                "parameters": CALCULATOR_TOOL["inputSchema"],
            },
        }]

    def test_empty_tools(self):
        """No tools -> empty declarations for every provider."""
        assert formats.tools_to_gemini([]) == []
        assert formats.tools_to_claude([]) == []
        assert formats.tools_to_openai([]) == []

    def test_malformed_tool_raises(self):
        """A descriptor without a name is a validation failure, not dropped."""
        with pytest.raises(ValidationError) as exc_info:
            formats.tools_to_openai([CALCULATOR_TOOL, {"description": "nameless"}])
        assert exc_info.value.context["parameter"] == "tools"

    def test_deterministic(self):
        """Same input, same output."""
        assert formats.tools_to_claude([CALCULATOR_TOOL]) == formats.tools_to_claude([CALCULATOR_TOOL])


class TestMessageFormats:
    """Internal messages -> provider message shapes."""

    def test_gemini_assistant_becomes_model(self):
        msgs = [Message(role="user", content="hi"), Message(role="assistant", content="hello")]
        assert formats.messages_to_gemini(msgs) == [
            {"role": "user", "parts": [{"text": "hi"}]},
            {"role": "model", "parts": [{"text": "hello"}]},
        ]

    def test_structured_content_is_serialized(self):
        """Non-text content is JSON-encoded for every provider."""
        msgs = [{"role": "user", "content": {"a": 1}}]
        assert formats.messages_to_claude(msgs) == [{"role": "user", "content": '{"a": 1}'}]
        assert formats.messages_to_openai(msgs) == [{"role": "user", "content": '{"a": 1}'}]
        assert formats.messages_to_gemini(msgs)[0]["parts"] == [{"text": '{"a": 1}'}]

    def test_order_preserved_without_alternation(self):
        """Consecutive same-role messages are forwarded as given."""
        msgs = [Message(role="user", content="a"), Message(role="user", content="b")]
        assert [m["content"] for m in formats.messages_to_openai(msgs)] == ["a", "b"]

    def test_malformed_message_raises(self):
        with pytest.raises(ValidationError):
            formats.messages_to_claude([{"role": "system", "content": "x"}])

    def test_content_to_text(self):
        assert formats.content_to_text("plain") == "plain"
        assert formats.content_to_text([1, 2]) == "[1, 2]"
