"""Main application entry point for the Moderation Desk API."""

import logging

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moderationdesk_api.api.moderation import router as moderation_router
from moderationdesk_api.config.settings import get_settings
from moderationdesk_api.database.connection import close_database
from moderationdesk_api.database.connection import db
from moderationdesk_api.database.connection import init_database
from moderationdesk_api.database.redis_connection import close_redis_connections
from moderationdesk_api.services.auto_refresh import get_auto_refresher
from moderationdesk_api.services.queue_loader import get_queue_loader

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    # Startup
    await init_database()
    try:
        result = await get_queue_loader().load()
        logger.info(f"Initial moderation queue load finished: {result.status}")
    except Exception as e:
        logger.exception(f"Initial moderation queue load failed: {e}")

    refresher = get_auto_refresher()
    if settings.moderation.auto_refresh_enabled:
        refresher.start()

    yield

    # Shutdown
    await refresher.stop()
    await close_redis_connections()
    await close_database()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Review desk for podcast, comment and article submissions",
        version=settings.version,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(moderation_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""

        db_healthy = await db.health_check()
        pool_stats = await db.get_pool_stats()

        return {
            "status": "ok" if db_healthy else "error",
            "database": {
                "healthy": db_healthy,
                "pool": pool_stats,
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    # Only run uvicorn when called directly, not when imported
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "moderationdesk_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info",
    )
