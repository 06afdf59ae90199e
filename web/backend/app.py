#!/usr/bin/env python3
"""
Dispatch API - FastAPI Application

Exposes vendor recommendations, auto-assignment and the job lifecycle.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.app_context import configure_logging
from database.database import dispose_engine
from .config import get_config
from .exceptions import register_exception_handlers
from .routers import analytics_router, jobs_router, matching_router

# Load configuration
config = get_config()

# Configure logging
configure_logging(config.logging)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Dispatch API",
        description="Vendor matching and job assignment for maintenance jobs",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.include_router(analytics_router)
    app.include_router(jobs_router)
    app.include_router(matching_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "dispatch-api"}

    return app


app = create_app()


def main():
    """Run the web server."""
    import uvicorn

    logger.info(f"Starting Dispatch API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level=config.logging.level.lower()
    )


if __name__ == "__main__":
    main()
