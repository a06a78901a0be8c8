import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request

from exposer.config import Settings
from exposer.config import settings as default_settings
from exposer.container import build_services
from exposer.database import create_tables
from exposer.exception_handlers import register_exception_handlers
from exposer.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from exposer.plugins.loader import initialize_plugins, unload_plugins
from exposer.routes import admin, proxy

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and load plugins on startup; release resources on shutdown."""
    services = app.state.services
    logger.info("Starting up the application...")
    await create_tables(services.engine)
    await initialize_plugins(services.registry, services.plugins, services.settings.plugins_config_file)

    yield

    logger.info("Shutting down the application...")
    await unload_plugins(services.registry)
    await services.http_client.aclose()
    await services.engine.dispose()


def create_app(settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """Create the FastAPI application."""
    if settings is None:
        settings = default_settings

    setup_structured_logging(settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title=settings.app_name,
        description="Expose stored route definitions as live HTTP endpoints",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.services = build_services(settings, http_client=http_client)

    app.add_middleware(StructuredLoggingMiddleware)
    register_exception_handlers(app)

    # Admin paths must be registered before the catch-all slug route
    app.include_router(admin.router, prefix=settings.route_prefix)
    app.include_router(proxy.router, prefix=settings.route_prefix)

    @app.get("/", tags=["Root"])
    async def root(request: Request):
        services = request.app.state.services
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "namespace": settings.namespace.strip("/"),
            "routes": len(await services.route_store.list()),
        }

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


app = create_app()


def main() -> None:
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)


if __name__ == "__main__":
    main()
