"""
Greenlight - application entry point

Responsibilities:
- Record GO/NO-GO release decisions
- Attach excluded JIRA tickets
- Email stakeholders when a decision is recorded
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from greenlight import __version__
from greenlight.api import router as api_router
from greenlight.core.config import settings
from greenlight.core.logging import setup_logging
from greenlight.core.redis_client import close_redis
from greenlight.database.engine import close_db

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan"""
    setup_logging()
    yield
    await close_redis()
    await close_db()


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Storage failures surface as a generic error"""
    logger.error(
        "storage_error",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    app = FastAPI(
        title=f"{settings.APP_NAME} - Release Management",
        description="GO/NO-GO release decisions with excluded JIRA tickets",
        version=__version__,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check() -> dict:
        """Liveness"""
        return {"status": "healthy", "service": "greenlight", "version": __version__}

    return app


app = create_app()
