"""
FastAPI Application

Main entry point for the Marketplace Revenue Analytics API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.config.logging import configure_logging
from marketplace_analytics.database.connection import close_database, init_database
from marketplace_analytics.errors import ClientError, DataStoreError
from marketplace_analytics.serving.api.middleware import RequestLoggingMiddleware
from marketplace_analytics.serving.api.routes import (
    dashboards_router,
    health_router,
    sellers_router,
)

logger = structlog.get_logger(__name__)

DATA_STORE_UNAVAILABLE_MESSAGE = "Analytics data is temporarily unavailable"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Marketplace Revenue Analytics API")

    try:
        await init_database()
    except Exception as e:
        # Dashboards degrade to zero values until the database is reachable
        logger.warning("Database init failed", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    logger.info(
        "Request rejected",
        path=request.url.path,
        error_type=exc.error_type,
        message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def data_store_error_handler(request: Request, exc: DataStoreError) -> JSONResponse:
    # The wrapped driver error can carry SQL and bound parameters; it stays in the log
    logger.error("Data store unavailable", path=request.url.path, operation=exc.operation, error=str(exc))
    return JSONResponse(
        status_code=503,
        content={
            "error": "data_store_unavailable",
            "message": DATA_STORE_UNAVAILABLE_MESSAGE,
            "details": {},
        },
    )


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Marketplace Revenue Analytics API",
        description="Seller and platform revenue read-models for a multi-seller marketplace",
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(DataStoreError, data_store_error_handler)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(dashboards_router, prefix="/api/v1/dashboards", tags=["Dashboards"])
    app.include_router(sellers_router, prefix="/api/v1/sellers", tags=["Sellers"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Marketplace Revenue Analytics API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
