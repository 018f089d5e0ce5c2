"""FastAPI application configuration module."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Internal imports
from ..config import environment  # noqa: F401  Loads .env, so it must come first
from ..config.cors import cors_config
from ..config.settings import AppConfig
from ..db import Database, DatabaseError, get_database
from ..exceptions import (
    CarnivalError,
    CarnivalNotFoundError,
    DuplicateConflictError,
    MergeNotAllowedError,
    MissingIdentityFieldsError,
)
from ..source_manager import SourceManager
from ..utils.logging_config import setup_logging
from .routes import (
    admin,
    carnivals,
    health
)

# Set up logging
setup_logging()
logger = logging.getLogger(__name__)

# Paths still served while the site is in maintenance or coming-soon mode
EXEMPT_PATH_PREFIXES = ('/api/admin', '/api/docs', '/api/redoc', '/openapi.json')

ERROR_STATUS_CODES = {
    MissingIdentityFieldsError: 400,
    DuplicateConflictError: 409,
    MergeNotAllowedError: 403,
    CarnivalNotFoundError: 404,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    try:
        app.state.db.ensure_tables_exist()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise
    yield
    # Shutdown
    app.state.db.dispose()


def _is_exempt(path: str) -> bool:
    return path == '/' or path.startswith(EXEMPT_PATH_PREFIXES)


def create_application(
    config: Optional[AppConfig] = None,
    database: Optional[Database] = None,
    source_manager: Optional[SourceManager] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application settings (read from the environment if omitted)
        database: Database to serve from (the process-wide one if omitted)
        source_manager: Source manager used by the admin sync
    """
    config = config or AppConfig.from_environment()

    app = FastAPI(
        title="Old Man Footy API",
        description="API for the masters rugby league carnival directory",
        version="1.0.0",
        docs_url=None if config.is_production else '/api/docs',
        redoc_url=None if config.is_production else '/api/redoc',
        lifespan=lifespan
    )
    app.state.config = config
    app.state.db = database or get_database()
    app.state.source_manager = source_manager or SourceManager(config)

    # Configure CORS
    app.add_middleware(CORSMiddleware, **cors_config(config.is_production))

    @app.middleware("http")
    async def site_mode(request: Request, call_next):
        if _is_exempt(request.url.path):
            return await call_next(request)
        if config.maintenance_mode:
            return JSONResponse(
                status_code=503,
                content={"detail": "Old Man Footy is down for maintenance. Please check back soon."}
            )
        if config.coming_soon_mode:
            return JSONResponse(
                status_code=503,
                content={"detail": "Old Man Footy is coming soon."}
            )
        return await call_next(request)

    @app.exception_handler(CarnivalError)
    async def carnival_error_handler(request: Request, exc: CarnivalError):
        status_code = ERROR_STATUS_CODES.get(type(exc), 400)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        logger.error(f"Database error on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Database error"})

    # Include health check router without prefix
    app.include_router(health.router)

    # Include routers with prefix
    app.include_router(carnivals.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    return app


# Create the application instance
app = create_application()
