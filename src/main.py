"""
Complaint SLA Service - Main Application
==========================================

Complaint lifecycle and SLA compliance engine.

Modules:
- Complaints: status transitions and the append-only status log
- SLA: configuration resolution, deadlines and classification
- Reporting: analytics aggregation and heat-map grids

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database, configuration stores
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

# Configuration
from src.config import settings

# Infrastructure
from src.infrastructure.database import (
    close_database,
    create_tables,
    get_engine,
    get_session_maker,
    init_database,
)

# Configuration resolution
from src.sla.application.services import ConfigCache, ConfigurationResolver
from src.sla.infrastructure.repositories import SQLAlchemyConfigStore, YAMLSeedProvider

# Module Routers
from src.complaints.interfaces import complaints_router
from src.reporting.interfaces import reports_router
from src.sla.interfaces import config_router

# Shared
from src.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    register_exception_handlers,
)
from src.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    database_url: Optional[str] = None,
    seed_path: Optional[Union[str, Path]] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    ``database_url`` and ``seed_path`` override the settings, mainly for
    tests and local runs.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        STARTUP:
        1. Setup structured logging
        2. Initialize database and create tables
        3. Load the static seed table
        4. Build the process-wide configuration cache and resolver

        SHUTDOWN:
        1. Close database connections
        """
        setup_logging(settings.log_level, settings.environment, settings.app_name)
        logger.info("Starting Complaint SLA Service", extra={
            "version": settings.app_version,
            "environment": settings.environment
        })

        init_database(database_url)

        # Development convenience; deployments run migrations
        try:
            await create_tables()
        except Exception as e:
            logger.warning(
                "Database not available - configuration falls back to the seed",
                extra={"error": str(e)}
            )

        seed = YAMLSeedProvider(seed_path or settings.config_seed_path)
        cache = ConfigCache(ttl_seconds=settings.config_cache_ttl_seconds)
        app.state.config_cache = cache
        app.state.config_resolver = ConfigurationResolver(
            store=SQLAlchemyConfigStore(get_session_maker()),
            seed=seed,
            cache=cache,
        )
        app.state.settings = settings

        logger.info("Complaint SLA Service started")

        yield

        logger.info("Shutting down Complaint SLA Service")
        await close_database()
        logger.info("Complaint SLA Service shutdown complete")

    app = FastAPI(
        title="Complaint SLA Service",
        description="""
    ## Complaint Lifecycle & SLA Compliance Engine

    - `POST /complaints/{id}/transitions` - change a complaint's status
    - `GET /complaints/{id}/history` - ordered status log
    - `GET /complaints/{id}/sla` - deadline and SLA classification
    - `GET /reports/analytics` - totals, compliance, trends, breakdowns
    - `GET /reports/heatmap` - ward x complaint-type count grid
    - `GET|PUT /config/{key}`, `GET /config/complaint-types` - configuration

    SLA hours per complaint type resolve through cache -> store -> seed ->
    default. A reopen restarts the SLA clock.
    """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Custom Middleware (from shared) ===
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    register_exception_handlers(app)

    # === Include Module Routers ===
    app.include_router(complaints_router)
    app.include_router(reports_router)
    app.include_router(config_router)

    @app.get("/health", tags=["Health"], responses={
        200: {
            "description": "Service health",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "version": "1.0.0",
                        "environment": "development",
                        "checks": {"database": "connected", "config_cache_entries": 3}
                    }
                }
            }
        }
    })
    async def health_check(request: Request):
        """
        Health check endpoint for load balancers and orchestrators.

        A database outage degrades the service (configuration falls back to
        the seed) rather than failing it.
        """
        checks = {"database": "connected"}
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            checks["database"] = f"error: {e}"

        cache = getattr(request.app.state, "config_cache", None)
        checks["config_cache_entries"] = len(cache) if cache is not None else 0

        return {
            "status": "healthy" if checks["database"] == "connected" else "degraded",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": checks
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "architecture": "Clean Architecture / Modular Monolith",
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "complaints": {
                    "prefix": "/complaints",
                    "endpoints": [
                        "POST /complaints/{id}/transitions - Change status",
                        "GET /complaints/{id}/history - Status log",
                        "GET /complaints/{id}/sla - SLA status"
                    ]
                },
                "reports": {
                    "prefix": "/reports",
                    "endpoints": [
                        "GET /reports/analytics - Aggregate report",
                        "GET /reports/heatmap - Distribution matrix"
                    ]
                },
                "config": {
                    "prefix": "/config",
                    "endpoints": [
                        "GET /config/complaint-types - Type catalog",
                        "GET /config/{key} - Resolve a key",
                        "PUT /config/{key} - Write a key"
                    ]
                }
            }
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower()
    )
