"""
Request-scoped accessors for the services created at startup.

main.lifespan stores the shared instances on ``app.state``; tests build a
bare app and assign their own fakes to the same attributes.
"""

from fastapi import Request

from routers.chat_orchestration import TurnDispatcher
from services.conversation_store import ConversationStoreClient
from services.tool_registry import ToolSessionManager


def get_sessions(request: Request) -> ToolSessionManager:
    return request.app.state.sessions


def get_dispatcher(request: Request) -> TurnDispatcher:
    return request.app.state.dispatcher


def get_store(request: Request) -> ConversationStoreClient:
    return request.app.state.store
