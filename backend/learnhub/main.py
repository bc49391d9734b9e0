"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnhub.api.v1.router import api_router
from learnhub.common.request_id import RequestIDMiddleware
from learnhub.core.config import settings
from learnhub.core.errors import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from learnhub.core.logging import get_logger, setup_logging
from learnhub.core.redis_client import close_redis, init_redis
from learnhub.db.session import init_db

logger = get_logger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    init_redis()
    if settings.ENV in ("dev", "test"):
        init_db()
    logger.info(
        "Application started",
        extra={"env": settings.ENV, "snapshot_backend": settings.TREND_SNAPSHOT_BACKEND},
    )
    yield
    close_redis()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=APP_VERSION,
        description="XP levels, achievements, streaks and dashboard trends for the LearnHub LMS",
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    # Starlette base class also covers router 404/405
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", tags=["Root"])
    async def root():
        """API information."""
        return {
            "message": settings.PROJECT_NAME,
            "version": APP_VERSION,
            "docs_url": "/docs" if settings.ENV != "prod" else None,
        }

    return app


app = create_app()
