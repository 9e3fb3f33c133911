"""
Parley MCP API - tool server session endpoints.

Each caller (``userId``) gets its own tool server session; connecting one
caller never changes the tool list another caller sees.

    POST /api/mcp/connect      {serverUrl, userId?} -> {success, tools}
    POST /api/mcp/disconnect   {userId?}            -> {success}
    GET  /api/mcp/tools?userId=                     -> {connected, tools}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from config import runtime_config
from errors import ValidationError
from services.tool_registry import ToolSessionManager
from routers.deps import get_sessions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mcp")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ConnectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    server_url: Optional[str] = Field(default=None, alias="serverUrl")
    user_id: Optional[str] = Field(default=None, alias="userId")


class DisconnectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")


def _caller(user_id: Optional[str]) -> str:
    return user_id or runtime_config.default_caller_id


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/connect")
async def connect(req: ConnectRequest, sessions: ToolSessionManager = Depends(get_sessions)):
    """Open (or reopen) the caller's tool server session."""
    if not req.server_url:
        raise ValidationError("Server URL is required", parameter="serverUrl")

    client = await sessions.connect(req.server_url, _caller(req.user_id))
    return {
        "success": True,
        "tools": [{"name": t.name, "description": t.description} for t in client.get_tools()],
    }


@router.post("/disconnect")
async def disconnect(req: DisconnectRequest, sessions: ToolSessionManager = Depends(get_sessions)):
    """Drop the caller's tool server session."""
    await sessions.disconnect(_caller(req.user_id))
    return {"success": True}


@router.get("/tools")
async def list_tools(userId: Optional[str] = None, sessions: ToolSessionManager = Depends(get_sessions)):
    """Cached tool list for the caller's session."""
    client = sessions.peek(_caller(userId))
    if client is None or not client.is_connected():
        return {"connected": False, "tools": []}
    return {"connected": True, "tools": [t.to_wire() for t in client.get_tools()]}
