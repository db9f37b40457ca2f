"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.config import GENERATION_KEY_VARS, Config
from server.middleware import RequestIDMiddleware
from server.routes import bookmarks, chat, conversations, health, history, providers
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log what the process is configured to reach; the orchestrator itself is built lazily."""
    config = Config()
    logger.info(
        "Deep Archive API starting up",
        extra={
            "extra_fields": {
                "web_engines": config.get_engine_info(),
                "snapshot_domains": len(config.SNAPSHOT_DOMAINS),
                "request_deadline_s": config.REQUEST_DEADLINE_S,
            }
        },
    )

    if not os.getenv("API_KEYS"):
        logger.warning("API_KEYS is not set; protected routes will reject every request")
    if not any(os.getenv(var) for var in GENERATION_KEY_VARS):
        logger.warning("No AI provider key is set; every answer will be degraded")

    yield

    from server import dependencies as deps

    orchestrator = getattr(deps.get_orchestrator, "_instance", None)
    if orchestrator is not None:
        orchestrator.router.close()
    logger.info("Deep Archive API shutting down")


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="Deep Archive API",
        description="Research answers with declassified-archive, web and snapshot sources",
        version=health.API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(conversations.router)
    app.include_router(history.router)
    app.include_router(bookmarks.router)
    app.include_router(providers.router)

    return app
