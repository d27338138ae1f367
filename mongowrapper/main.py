"""FastAPI app entry: config, logging, health, and graceful shutdown of the MongoDB handle."""

from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mongowrapper.config.logging import configure_logging, get_logger
from mongowrapper.config.settings import Settings, get_settings
from mongowrapper.resources.mongo.client import create_driver, open_default_handle
from mongowrapper.resources.mongo.drivers import BaseDriver
from mongowrapper.resources.mongo.handle import HandleState
from mongowrapper.resources.mongo.session import ping_mongo
from mongowrapper.services.connection.errors import (
    DatabaseConnectionError,
    HandleStateError,
    InvalidIdentifierError,
    MongoWrapperError,
    NotConnectedError,
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: config, logging, and the MongoDB handle. Shutdown: close the handle."""
    settings: Settings = app.state.settings or get_settings()
    configure_logging(settings)
    logger.info("Application starting", extra={"app_name": settings.app_name, "environment": settings.environment})
    app.state.mongo = None
    try:
        app.state.driver = app.state.driver or create_driver(settings)
        app.state.mongo = await open_default_handle(settings, app.state.driver)
    except MongoWrapperError as e:
        logger.error("Failed to open MongoDB handle on startup", extra={"error": str(e)})
        # Don't fail startup; /ready reports the dependency as down
    yield
    logger.info("Application shutting down")
    handle = app.state.mongo
    if handle is not None and handle.state is HandleState.OPEN:
        try:
            await handle.close()
        except DatabaseConnectionError as e:
            logger.warning("Error closing MongoDB handle", extra={"error": str(e)})
    logger.info("Shutdown complete")


def create_app(settings: Settings | None = None, driver: BaseDriver | None = None) -> FastAPI:
    """Build the app. settings and driver default to environment settings and the configured driver."""
    app = FastAPI(
        title="Mongo Wrapper",
        description="MongoDB connection descriptor and lifecycle service",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.driver = driver
    app.state.mongo = None

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Liveness: service is up. Does not check dependencies."""
        return {"status": "ok"}

    @app.get("/ready")
    async def ready(request: Request):
        """Readiness: service can serve traffic. Verifies MongoDB connectivity."""
        mongo = await ping_mongo(request.app.state.mongo)
        ok = mongo.get("ok", False)
        body = {
            "status": "ok" if ok else "degraded",
            "mongo": {"ok": ok, "error": mongo.get("error")},
        }
        return JSONResponse(content=body, status_code=200 if ok else 503)

    @app.get("/connection")
    async def connection(request: Request) -> dict[str, Any]:
        """Current handle state, selection, and redacted URI."""
        handle = request.app.state.mongo
        if handle is None:
            raise NotConnectedError("MongoDB handle is not available")
        return {
            "state": handle.state.value,
            "database": handle.database_name,
            "collection": handle.collection_name,
            "uri": handle.descriptor.redacted_uri,
        }

    @app.get("/ids/{value}")
    async def parse_id(value: str, request: Request) -> dict[str, Any]:
        """Validate value as a document identifier. Needs a driver, not a live session."""
        handle = request.app.state.mongo
        if handle is not None:
            return {"id": str(handle.to_object_id(value))}
        driver = request.app.state.driver
        if driver is None:
            raise NotConnectedError("MongoDB driver is not available")
        return {"id": str(driver.parse_identifier(value))}

    @app.exception_handler(MongoWrapperError)
    async def mongo_exception_handler(_request: Request, exc: MongoWrapperError):
        """Connection and handle-state failures get clear, non-leaking messages."""
        exc_name = type(exc).__name__
        if isinstance(exc, InvalidIdentifierError):
            return JSONResponse(content={"detail": str(exc)}, status_code=400)
        if isinstance(exc, (DatabaseConnectionError, HandleStateError)):
            logger.warning("Connection error", extra={"error": exc_name})
            return JSONResponse(
                content={"detail": "A dependency is temporarily unavailable. Please retry later."},
                status_code=503,
            )
        logger.exception("Unhandled error")
        return JSONResponse(content={"detail": "An internal error occurred."}, status_code=500)

    return app


app = create_app()


def run() -> None:
    """Serve the app on the configured host and port, over TLS when cert and key files are set."""
    settings = get_settings()
    ssl_kwargs: dict[str, Any] = {}
    if settings.server_ssl_cert_file and settings.server_ssl_key_file:
        ssl_kwargs = {
            "ssl_certfile": settings.server_ssl_cert_file,
            "ssl_keyfile": settings.server_ssl_key_file,
        }
    uvicorn.run("mongowrapper.main:app", host=settings.host, port=settings.port, **ssl_kwargs)
