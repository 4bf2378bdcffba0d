import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from predictsafe.api.api_v1.api import api_router
from predictsafe.core.config import settings, validate_production_settings
from predictsafe.core.error_handlers import (
    football_api_exception_handler,
    general_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)
from predictsafe.db.session import AsyncSessionLocal
from predictsafe.services.football_api import FootballAPIError
from predictsafe.utils.dates import utcnow

logger = logging.getLogger(__name__)

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",  # Vite default
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI application."""
    logger.info(f"Environment: {settings.ENV}")
    if settings.ENV == "production":
        validate_production_settings()

    # Simple database connectivity check
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        # Don't fail startup for database issues in development
        if settings.ENV == "production":
            raise

    yield
    logger.info("lifespan shutdown")


def cors_origins() -> list[str]:
    if settings.ENV == "development":
        logger.info("Development mode: Allowing all CORS origins")
        return ["*"]
    origins = list(settings.BACKEND_CORS_ORIGINS)
    if settings.SITE_URL and settings.SITE_URL not in origins:
        origins.append(settings.SITE_URL)
    if settings.ENV != "production":
        origins.extend(o for o in DEV_ORIGINS if o not in origins)
    return origins


def create_app() -> FastAPI:
    """Create FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
    )

    # Health check endpoint
    @app.get("/healthz")
    async def health_check():
        """Health check endpoint for container orchestration."""
        try:
            async with AsyncSessionLocal() as session:
                await session.execute(text("SELECT 1"))

            return {
                "status": "healthy",
                "timestamp": utcnow().isoformat(),
                "service": settings.PROJECT_NAME
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise HTTPException(
                status_code=503,
                detail="Service unhealthy"
            )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        # Mask sensitive headers (Authorization)
        auth_header = request.headers.get("authorization")
        if auth_header:
            masked = auth_header[:16] + "..." if len(auth_header) > 16 else auth_header
            logger.debug(f"Authorization: {masked}")

        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} {dict(request.query_params)} "
            f"-> {response.status_code} ({process_time:.4f}s)"
        )
        return response

    # Add exception handlers
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(FootballAPIError, football_api_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    origins = cors_origins()
    logger.info("CORS Origins: %s", origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Include the routers
    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="localhost", port=settings.SERVER_PORT)
