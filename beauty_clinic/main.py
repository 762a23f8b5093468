"""
Main FastAPI application entry point.
Configures the application, middleware, and includes routers.

``create_app`` builds everything from a ``Settings`` instance: the engine and
session factory live on ``app.state`` and reach handlers through ``get_db``.
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .config import Settings, get_settings
from .core.features import include_routers
from .core.middleware import setup_middlewares
from .database import create_db_engine, create_session_factory
from .exceptions import register_exception_handlers
from .models import Base

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"🚀 Starting Beauty Clinic API ({settings.environment})...")
    if settings.auto_create_tables:
        # Create database tables if they don't exist
        Base.metadata.create_all(bind=app.state.engine)
        logger.info("Database tables ensured")
    yield
    logger.info("Shutting down Beauty Clinic API")


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use, loaded from the environment when omitted
        engine: Pre-built engine, created from ``settings.database_url`` when omitted

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    engine = engine or create_db_engine(settings.database_url)

    app = FastAPI(
        title="Beauty Clinic API",
        description="API for the multi-tenant beauty clinic booking platform",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Register exception handlers
    register_exception_handlers(app)

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup custom middleware
    setup_middlewares(app, settings)

    # Include routers
    mounted = include_routers(app, settings)
    logger.info(f"Mounted routers: {', '.join(entry.prefix for entry in mounted)}")

    @app.get("/", tags=["Root"])
    def root():
        """
        Root endpoint.

        Returns:
            dict: Welcome message and API version
        """
        return {
            "success": True,
            "data": {"name": "Beauty Clinic API", "version": __version__},
            "message": "Welcome to Beauty Clinic API",
        }

    @app.get("/health", tags=["Root"])
    def health_check(request: Request):
        """
        Health check endpoint for monitoring.

        Returns:
            dict: Health status including database connectivity
        """
        try:
            with request.app.state.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            database = "connected"
        except SQLAlchemyError as e:
            logger.error(f"Health check database error: {str(e)}")
            database = "disconnected"
        healthy = database == "connected"
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": healthy,
                "data": {
                    "status": "healthy" if healthy else "unhealthy",
                    "database": database,
                    "environment": settings.environment,
                },
            },
        )

    return app


def run() -> None:
    """Run the API with uvicorn, honouring PORT."""
    load_dotenv()
    settings = get_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
