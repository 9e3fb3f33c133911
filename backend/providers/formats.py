"""
Format Adapters - internal tools/messages -> provider request shapes.

Pure, stateless and deterministic. No I/O.

Tool declarations:
    Gemini  {name, description, parameters}          (wrapped in function_declarations by the adapter)
    Claude  {name, description, input_schema}
    OpenAI  {type: "function", function: {name, description, parameters}}

Messages:
    Gemini  {role: "user" | "model", parts: [{text}]}
    Claude  {role, content: text}
    OpenAI  {role, content: text}

Malformed tool descriptors raise ValidationError; they are never dropped.
"""

import json
from typing import Any, Dict, List, Sequence, Union

from pydantic import ValidationError as SchemaError

from errors import ValidationError
from models import Message, ToolDescriptor

ToolLike = Union[ToolDescriptor, Dict[str, Any]]
MessageLike = Union[Message, Dict[str, Any]]

# JSON Schema keywords Gemini's function declaration schema rejects
_GEMINI_UNSUPPORTED_SCHEMA_KEYS = frozenset({"$schema", "additionalProperties", "$id", "$ref", "definitions", "$defs"})


def content_to_text(content: Any) -> str:
    """Text passes through; anything structured is JSON-serialized."""
    if isinstance(content, str):
        return content
    return json.dumps(content)


def _coerce_tool(tool: ToolLike) -> ToolDescriptor:
    if isinstance(tool, ToolDescriptor):
        return tool
    try:
        return ToolDescriptor.model_validate(tool)
    except SchemaError as e:
        raise ValidationError(
            "Malformed tool descriptor",
            details=str(e),
            parameter="tools",
            received=repr(tool)[:200],
        ) from e


def _coerce_message(message: MessageLike) -> Message:
    if isinstance(message, Message):
        return message
    try:
        return Message.model_validate(message)
    except SchemaError as e:
        raise ValidationError("Malformed message", details=str(e), parameter="messages") from e


def _strip_schema(schema: Any) -> Any:
    if isinstance(schema, dict):
        return {
            key: _strip_schema(value)
            for key, value in schema.items()
            if key not in _GEMINI_UNSUPPORTED_SCHEMA_KEYS
        }
    if isinstance(schema, list):
        return [_strip_schema(item) for item in schema]
    return schema


# =============================================================================
# TOOLS
# =============================================================================


def tools_to_gemini(tools: Sequence[ToolLike]) -> List[Dict[str, Any]]:
    """Gemini function declarations (inputSchema renamed to parameters)."""
    declarations = []
    for tool in map(_coerce_tool, tools):
        declaration: Dict[str, Any] = {"name": tool.name, "description": tool.description}
        if tool.input_schema:
            declaration["parameters"] = _strip_schema(tool.input_schema)
        declarations.append(declaration)
    return declarations


def tools_to_claude(tools: Sequence[ToolLike]) -> List[Dict[str, Any]]:
    """Anthropic tool definitions (inputSchema renamed to input_schema)."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.input_schema or {"type": "object", "properties": {}},
        }
        for tool in map(_coerce_tool, tools)
    ]


def tools_to_openai(tools: Sequence[ToolLike]) -> List[Dict[str, Any]]:
    """OpenAI function tools (nested under ``function``)."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.input_schema or {"type": "object", "properties": {}},
            },
        }
        for tool in map(_coerce_tool, tools)
    ]


# =============================================================================
# MESSAGES
# =============================================================================


def messages_to_gemini(messages: Sequence[MessageLike]) -> List[Dict[str, Any]]:
    """Gemini contents; the assistant role is called ``model``."""
    return [
        {
            "role": "model" if msg.role == "assistant" else msg.role,
            "parts": [{"text": content_to_text(msg.content)}],
        }
        for msg in map(_coerce_message, messages)
    ]


def messages_to_claude(messages: Sequence[MessageLike]) -> List[Dict[str, Any]]:
    return [{"role": msg.role, "content": content_to_text(msg.content)} for msg in map(_coerce_message, messages)]


def messages_to_openai(messages: Sequence[MessageLike]) -> List[Dict[str, Any]]:
    return [{"role": msg.role, "content": content_to_text(msg.content)} for msg in map(_coerce_message, messages)]
