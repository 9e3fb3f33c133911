"""
Shared pytest fixtures for Parley tests.

Remote collaborators are faked in-process:
- FakeToolServer: JSON-RPC tool server behind an httpx.MockTransport
- FakeConversationStore: in-memory conversation store behind an httpx.MockTransport
- fake SDK clients for Gemini / Anthropic / OpenAI returning canned raw dicts
"""

import itertools
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from config import RuntimeConfig

CALCULATOR_TOOL = {
    "name": "calculator",
    "description": "Evaluate an arithmetic expression",
    "inputSchema": {
        "type": "object",
        "properties": {"expr": {"type": "string"}},
        "required": ["expr"],
    },
}


# ---------------------------------------------------------------------------
# Tool server
# ---------------------------------------------------------------------------

class FakeToolServer:
    """JSON-RPC tool server. Records every request body it receives."""

    def __init__(self, tools=None, results=None, errors=None, protocol_version="2024-11-05"):
        self.tools = list(tools or [])
        self.results = dict(results or {})
        self.errors = dict(errors or {})
        self.protocol_version = protocol_version
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append({"url": str(request.url), "user_id": request.url.params.get("userId"), **body})
        method = body["method"]

        if method == "initialize":
            result = {"capabilities": {"tools": {}}, "serverInfo": {"name": "fake", "version": "0"}}
            if self.protocol_version:
                result["protocolVersion"] = self.protocol_version
        elif method == "tools/list":
            result = {"tools": self.tools}
        elif method == "tools/call":
            name = body["params"]["name"]
            if name in self.errors:
                return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": self.errors[name]}})
            if name not in self.results:
                return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": f"Unknown tool: {name}"}})
            result = self.results[name]
        else:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "Method not found"}})

        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def methods(self):
        return [r["method"] for r in self.requests]


@pytest.fixture
def tool_server():
    return FakeToolServer(tools=[CALCULATOR_TOOL], results={"calculator": 4})


# ---------------------------------------------------------------------------
# Conversation store
# ---------------------------------------------------------------------------

class FakeConversationStore:
    """In-memory conversation store speaking the store's REST API."""

    def __init__(self, fail_paths=()):
        self.conversations = {}
        self.fail_paths = tuple(fail_paths)
        self.calls = []
        self._ids = itertools.count(1)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))

        if any(path.startswith(p) for p in self.fail_paths):
            return httpx.Response(503, text="store unavailable")

        parts = [p for p in path.split("/") if p][2:]  # strip "api/conversations"

        if request.method == "POST" and not parts:
            conv_id = f"conv-{next(self._ids)}"
            self.conversations[conv_id] = {
                "id": conv_id,
                "userId": body["userId"],
                "title": body["title"],
                "lastLLM": body["lastLLM"],
                "messages": list(body["messages"]),
            }
            return httpx.Response(201, json={"id": conv_id})

        if request.method == "GET" and not parts:
            user_id = request.url.params.get("userId")
            listing = [
                {k: v for k, v in c.items() if k != "messages"}
                for c in self.conversations.values()
                if c["userId"] == user_id
            ]
            return httpx.Response(200, json=listing)

        conv = self.conversations.get(parts[0]) if parts else None
        if conv is None:
            return httpx.Response(404, json={"error": "Conversation not found"})

        if request.method == "POST" and parts[1:] == ["messages"]:
            conv["messages"].append(body)
            return httpx.Response(201, json={"success": True})
        if request.method == "GET" and parts[1:] == ["messages"]:
            return httpx.Response(200, json=conv)
        if request.method == "PATCH":
            conv.update(body)
            return httpx.Response(200, json={k: v for k, v in conv.items() if k != "messages"})
        if request.method == "DELETE":
            del self.conversations[parts[0]]
            return httpx.Response(204)

        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def store_backend():
    return FakeConversationStore()


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

@pytest.fixture
def config():
    """RuntimeConfig with every provider keyed (independent of the environment)."""
    return RuntimeConfig(
        default_provider="gemini",
        gemini_api_key="test-gemini",
        anthropic_api_key="test-anthropic",
        openai_api_key="test-openai",
        backend_url="http://store.test",
    )


# ---------------------------------------------------------------------------
# Fake provider SDK responses (raw dict shapes)
# ---------------------------------------------------------------------------

def gemini_text(text):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def gemini_call(name, args):
    return {"candidates": [{"content": {"role": "model", "parts": [{"function_call": {"name": name, "args": args}}]}}]}


def claude_text(text):
    return {"id": "msg_1", "role": "assistant", "content": [{"type": "text", "text": text}], "stop_reason": "end_turn"}


def claude_tool_use(name, args, tool_id="toolu_1", preamble=None):
    content = [{"type": "text", "text": preamble}] if preamble else []
    content.append({"type": "tool_use", "id": tool_id, "name": name, "input": args})
    return {"id": "msg_1", "role": "assistant", "content": content, "stop_reason": "tool_use"}


def openai_text(text):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": text}}]}


def openai_tool_calls(*calls):
    """calls: (id, name, arguments-json-string) tuples"""
    return {
        "choices": [{
            "index": 0,
            "message": {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {"id": cid, "type": "function", "function": {"name": name, "arguments": arguments}}
                    for cid, name, arguments in calls
                ],
            },
        }]
    }


def fake_gemini_factory(*responses):
    """Model factory whose generate_content_async returns responses in order."""
    model = SimpleNamespace(generate_content_async=AsyncMock(side_effect=list(responses)))
    factory_calls = []

    def factory(api_key, model_name, tools):
        factory_calls.append({"api_key": api_key, "model": model_name, "tools": tools})
        return model

    factory.model = model
    factory.calls = factory_calls
    return factory


def fake_anthropic_client(*responses):
    return SimpleNamespace(messages=SimpleNamespace(create=AsyncMock(side_effect=list(responses))))


def fake_openai_client(*responses):
    completions = SimpleNamespace(create=AsyncMock(side_effect=list(responses)))
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))
