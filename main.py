"""
Haven - Main Application Entry Point

Conversation store and analytics backend for mental-health, spiritual and
general support chats.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from haven import __version__
from haven.api import chats
from haven.api.errors import register_exception_handlers
from haven.core.config import get_settings
from haven.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting Haven in {settings.ENVIRONMENT} mode...")

    # Initialize database if needed
    if settings.is_local:
        from haven.infrastructure.local.database import get_engine, init_db

        await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Haven...")
    if settings.is_local:
        await get_engine().dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Haven",
        description="Conversation store and analytics for supportive AI chats",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    register_exception_handlers(app)
    app.include_router(chats.router, prefix="/api/chats", tags=["chats"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": __version__,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
