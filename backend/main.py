"""
Parley - multi-provider LLM chat orchestration
FastAPI backend: Gemini / Claude / ChatGPT with tool server calls
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import PROVIDER_IDS, runtime_config
from errors import register_exception_handlers
from logging_config import setup_logging
from routers import chat, conversations, mcp_api
from routers.chat_orchestration import TurnDispatcher
from services.conversation_store import ConversationGateway, ConversationStoreClient
from services.tool_registry import ToolSessionManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events"""
    # Startup
    store = ConversationStoreClient()
    sessions = ToolSessionManager()
    app.state.store = store
    app.state.sessions = sessions
    app.state.dispatcher = TurnDispatcher(sessions=sessions, gateway=ConversationGateway(store))

    configured = [p for p in PROVIDER_IDS if runtime_config.credential_for(p)]
    logger.info(
        f"Parley ready: default provider={runtime_config.resolve_provider(None)}, "
        f"configured={configured or 'none'}, store={runtime_config.backend_url}"
    )
    if not configured:
        logger.warning("No provider API keys configured; every chat turn will fail")

    yield

    # Shutdown
    await sessions.close_all()
    logger.info("Parley signing off")


def create_app() -> FastAPI:
    setup_logging(runtime_config.log_level)

    app = FastAPI(
        title="Parley",
        description="Multi-provider LLM chat with tool server integration",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=runtime_config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # API Routers (each carries its own /api prefix)
    app.include_router(chat.router, tags=["chat"])
    app.include_router(mcp_api.router, tags=["mcp"])
    app.include_router(conversations.router, tags=["conversations"])

    @app.get("/health")
    async def health():
        """Liveness plus provider availability and the masked runtime config."""
        return {
            "status": "healthy",
            "providers": {p: runtime_config.credential_for(p) is not None for p in PROVIDER_IDS},
            "config": runtime_config.to_dict(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
