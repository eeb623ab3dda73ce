"""Main FastAPI application for LinkFolio."""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .api import analytics, auth, links, profiles, users
from .api.middleware import (
    ProblemDetailsMiddleware,
    RequestSizeLimitMiddleware,
    register_exception_handlers,
)
from .auth.jwt_auth import JWTTokenManager
from .config import LinkFolioConfig, load_config
from .context import AppContext, get_app_context
from .db.database import create_database_engine, create_session_factory
from .utils.logging_config import get_logger, initialize_logging

SERVICE_NAME = "linkfolio"


def build_context(config: LinkFolioConfig) -> AppContext:
    """Create the process-wide resources described by ``config``."""
    engine = create_database_engine(
        config.database.url,
        enable_query_logging=config.database.log_queries,
        echo=config.database.echo,
    )
    return AppContext(
        config=config,
        engine=engine,
        session_factory=create_session_factory(engine),
        jwt_manager=JWTTokenManager(
            secret_key=config.app.jwt_secret_key,
            algorithm=config.app.jwt_algorithm,
            ttl_days=config.app.session_ttl_days,
        ),
    )


def create_app(config: Optional[LinkFolioConfig] = None) -> FastAPI:
    """
    Build the LinkFolio application.

    Args:
        config: Configuration to use; loaded from file and environment when omitted

    Returns:
        Configured FastAPI app with its ``AppContext`` on ``app.state.context``
    """
    config = config or load_config()
    initialize_logging(
        log_dir=config.app.log_dir,
        debug=config.server.debug,
        log_to_file=config.app.log_to_file,
        level=config.app.log_level,
    )
    logger = get_logger("main")
    context = build_context(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{config.app.app_name} {__version__} starting")
        yield
        context.dispose()
        logger.info(f"{config.app.app_name} stopped")

    app = FastAPI(
        title=config.app.app_name,
        description=config.app.description,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.context = context

    register_exception_handlers(app)
    app.add_middleware(ProblemDetailsMiddleware)
    app.add_middleware(
        RequestSizeLimitMiddleware, max_bytes=config.app.max_request_bytes
    )

    allowed_origins = [config.app.public_url, *config.server.cors_origins]
    if config.server.debug:
        allowed_origins.extend(["http://127.0.0.1:3000", "http://localhost:3000"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(set(allowed_origins)),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
    )

    app.include_router(auth.router)
    app.include_router(links.router)
    app.include_router(users.router)
    app.include_router(analytics.router)
    app.include_router(profiles.router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}

    @app.get("/ready", tags=["health"])
    async def readiness_check(ctx: AppContext = Depends(get_app_context)):
        """Readiness check that validates database connectivity."""
        start_time = time.time()
        checks = {"database": False}
        errors = []

        try:
            with ctx.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            checks["database"] = True
        except SQLAlchemyError as exc:
            logger.warning(f"Readiness database check failed: {exc}")
            errors.append(f"Database check failed: {exc}")

        all_ready = all(checks.values())
        response = {
            "status": "ready" if all_ready else "not_ready",
            "service": SERVICE_NAME,
            "version": __version__,
            "checks": checks,
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }
        if errors:
            response["errors"] = errors

        return JSONResponse(content=response, status_code=200 if all_ready else 503)

    logger.debug(f"Application created with database {config.database.url}")
    return app


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    config = load_config()
    uvicorn.run(
        "linkfolio.main:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=config.server.auto_reload,
    )
