"""
Tool Registry Client - JSON-RPC session against an external tool server.

Provides:
- Two-step handshake (initialize -> tools/list) with a cached tool list
- Tool invocation by name (tools/call)
- One session per caller id via ToolSessionManager, so callers never see
  each other's tool lists

Protocol: every call is a fresh HTTP POST to ``{serverUrl}/mcp?userId=<caller>``
with a JSON-RPC 2.0 body. Errors come back as ``{"error": {"message": ...}}``.

Usage:
    from services.tool_registry import ToolSessionManager

    sessions = ToolSessionManager()
    client = await sessions.connect("http://localhost:8080", "user-1")
    result = await client.call_tool("calculator", {"expr": "2+2"})
"""

import asyncio
import itertools
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as SchemaError

from config import runtime_config
from errors import NotConnectedError, ToolConnectionError, ToolExecutionError
from models import ToolDescriptor

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
CLIENT_INFO = {"name": "parley-mcp-client", "version": "1.0.0"}


class _RpcError(Exception):
    """Protocol-level error reported by the tool server."""


class ToolRegistryClient:
    """One caller's session with a tool server.

    Session state (server URL, caller id, cached tools) is only mutated
    while holding ``_lock``; readers take a snapshot.
    """

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            timeout: Per-request timeout in seconds (defaults to config http_timeout)
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self._timeout = timeout or runtime_config.http_timeout
        self._transport = transport
        self._lock = asyncio.Lock()
        self._ids = itertools.count(1)

        self._connected = False
        self._server_url = ""
        self._caller_id = ""
        self._tools: List[ToolDescriptor] = []

    @property
    def server_url(self) -> str:
        return self._server_url

    @property
    def caller_id(self) -> str:
        return self._caller_id

    async def connect(self, server_url: str, caller_id: str) -> None:
        """Open a session: initialize, then fetch and cache the tool list.

        Tears down any existing session first.

        Raises:
            ToolConnectionError: initialize response lacks protocolVersion,
                the tools/list result is malformed, the server reports an
                error, or the transport fails
        """
        async with self._lock:
            if self._connected:
                self._reset()

            url = server_url.rstrip("/")
            try:
                init = await self._request(url, caller_id, "initialize", {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {}},
                    "clientInfo": CLIENT_INFO,
                })
                if not isinstance(init, dict) or not init.get("protocolVersion"):
                    raise ToolConnectionError(
                        "Invalid initialize response",
                        details="protocolVersion missing from initialize result",
                        server_url=url,
                    )

                listing = await self._request(url, caller_id, "tools/list", {})
                # A listing without a tools key means no tools; anything else must be a list of objects
                raw_tools = (listing.get("tools") or []) if isinstance(listing, dict) else None
                if not isinstance(raw_tools, list) or not all(isinstance(t, dict) for t in raw_tools):
                    raise ToolConnectionError(
                        "Invalid tools/list response",
                        details=f"expected an object with a tools array, got {type(listing).__name__}",
                        server_url=url,
                    )
                tools = [
                    ToolDescriptor(
                        name=t["name"],
                        description=t.get("description") or "",
                        input_schema=t.get("inputSchema"),
                    )
                    for t in raw_tools
                ]
            except ToolConnectionError:
                self._reset()
                raise
            except _RpcError as e:
                self._reset()
                raise ToolConnectionError("Tool server rejected handshake", details=str(e), server_url=url) from e
            except (httpx.HTTPError, ValueError, KeyError, TypeError, SchemaError) as e:
                self._reset()
                raise ToolConnectionError("Failed to connect to tool server", details=str(e), server_url=url) from e

            self._server_url = url
            self._caller_id = caller_id
            self._tools = tools
            self._connected = True

        logger.info(f"Connected to tool server {url} for {caller_id} with tools: {[t.name for t in tools]}")

    async def disconnect(self) -> None:
        """Drop the session and the cached tools. Always succeeds."""
        async with self._lock:
            self._reset()

    def get_tools(self) -> List[ToolDescriptor]:
        """Snapshot of the cached tool list (empty if never connected)."""
        return list(self._tools)

    def is_connected(self) -> bool:
        return self._connected

    async def call_tool(self, name: str, args: Optional[Dict[str, Any]]) -> Any:
        """Invoke a tool on the server and return its result payload.

        Raises:
            NotConnectedError: no active session
            ToolExecutionError: the server reported an error or the call failed
        """
        async with self._lock:
            if not self._connected:
                raise NotConnectedError("Not connected to MCP server")
            url, caller_id = self._server_url, self._caller_id

        try:
            return await self._request(url, caller_id, "tools/call", {"name": name, "arguments": args or {}})
        except _RpcError as e:
            logger.error(f"Tool call failed for {name}: {e}")
            raise ToolExecutionError(str(e), tool_name=name) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Tool call failed for {name}: {e}")
            raise ToolExecutionError(str(e) or type(e).__name__, tool_name=name) from e

    async def _request(self, url: str, caller_id: str, method: str, params: Dict[str, Any]) -> Any:
        body = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.post(f"{url}/mcp", params={"userId": caller_id}, json=body)
        resp.raise_for_status()
        data = resp.json()

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise _RpcError(f"MCP Error: {message}")
        return data.get("result") if isinstance(data, dict) else None

    def _reset(self) -> None:
        self._connected = False
        self._server_url = ""
        self._caller_id = ""
        self._tools = []


class ToolSessionManager:
    """Holds one ToolRegistryClient per caller id."""

    def __init__(self, client_factory=ToolRegistryClient):
        self._client_factory = client_factory
        self._sessions: Dict[str, ToolRegistryClient] = {}

    def get(self, caller_id: str) -> ToolRegistryClient:
        """Return the caller's client, creating an unconnected one on first use."""
        client = self._sessions.get(caller_id)
        if client is None:
            client = self._client_factory()
            self._sessions[caller_id] = client
        return client

    def peek(self, caller_id: str) -> Optional[ToolRegistryClient]:
        """Return the caller's client without creating one."""
        return self._sessions.get(caller_id)

    async def connect(self, server_url: str, caller_id: str) -> ToolRegistryClient:
        client = self.get(caller_id)
        await client.connect(server_url, caller_id)
        return client

    async def disconnect(self, caller_id: str) -> None:
        client = self._sessions.pop(caller_id, None)
        if client is not None:
            await client.disconnect()

    async def close_all(self) -> None:
        for caller_id in list(self._sessions):
            await self.disconnect(caller_id)

    def __len__(self) -> int:
        return len(self._sessions)
