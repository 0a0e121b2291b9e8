import asyncio
import logging
from contextlib import asynccontextmanager

import logfire
from dishka import AsyncContainer
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from idgate.application.api.v1.errors import map_idgate_error
from idgate.application.api.v1.routes import auth, health, whitelist
from idgate.application.di import create_container
from idgate.config import Config, configure_logging
from idgate.domain.shared.authorization.startup import validate_all_handlers
from idgate.domain.shared.error import IdGateError
from idgate.infrastructure.persistence.migrate import run_migrations
from idgate.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    config: Config = app.state.config

    # Only SQLite is migrated automatically; PostgreSQL deployments run alembic themselves
    if config.database.auto_migrate and config.database.url.startswith("sqlite"):
        await asyncio.to_thread(run_migrations, config.database.url)

    yield

    await container.close()


def create_app(
    config: Config | None = None, container: AsyncContainer | None = None
) -> FastAPI:
    """Create FastAPI application.

    Tests pass their own container to swap adapters such as the HTTP client.
    """
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting idgate server: %s v%s", config.server.name, config.server.version)

    if not config.auth.jwt.secret:
        logger.warning("IDGATE_AUTH__JWT__SECRET is not set; tokens cannot be issued safely")

    # Validate all handlers have authorization declarations (fail fast)
    validate_all_handlers()

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )
    app_instance.state.config = config

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    # Setup dependency injection
    container = container or create_container(config)
    setup_dishka(container, app_instance)

    # Register v1 routes with /api/v1 prefix
    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(auth.router, prefix="/api/v1")
    app_instance.include_router(whitelist.router, prefix="/api/v1")

    # Global idgate error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(IdGateError)
    async def idgate_error_handler(request: Request, exc: IdGateError):
        http_exc = map_idgate_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
# In production: `idgate serve` handles this
# In tests: configure in conftest.py
app = create_app()
