"""
ASGI entry point: FastAPI introspection endpoints plus the Socket.IO server.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import socketio
import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from cursor_sync.collaboration.server import CursorSyncServer
from cursor_sync.core.config import settings
from cursor_sync.core.error_handlers import register_error_handlers
from cursor_sync.core.logging_config import configure_logging

logger = logging.getLogger(__name__)

# Global synchronization server instance
sync_server = CursorSyncServer()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for the sync server."""
    logger.info(f"{settings.app_name} {settings.app_version} started on port {settings.port}")

    yield

    logger.info(
        f"{settings.app_name} shutting down with "
        f"{len(app.state.sync_server.context.registry)} connection(s) open"
    )


def create_app(server: Optional[CursorSyncServer] = None) -> FastAPI:
    """Create the FastAPI app exposing stats, reset and liveness."""
    server = server or sync_server

    app = FastAPI(
        title=settings.app_name,
        description="Shared cursor presence and exclusive object manipulation",
        version=settings.app_version,
        lifespan=lifespan
    )
    app.state.sync_server = server

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/stats")
    async def get_stats() -> Dict[str, Any]:
        """Connection and object summaries, for operational visibility only."""
        return server.get_stats()

    @app.post("/reset")
    async def reset_objects() -> Dict[str, Any]:
        """Release every object and re-broadcast the object snapshot."""
        return await server.reset()

    @app.get("/health/live")
    async def live() -> Dict[str, str]:
        """Basic liveness endpoint."""
        return {"status": "ok"}

    return app


def create_asgi_app(server: Optional[CursorSyncServer] = None) -> socketio.ASGIApp:
    """Mount the Socket.IO server in front of the FastAPI app."""
    server = server or sync_server
    return socketio.ASGIApp(server.sio, other_asgi_app=create_app(server))


app = create_asgi_app()


def main():
    configure_logging()
    uvicorn.run(
        "cursor_sync.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
