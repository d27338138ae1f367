"""MongoDB health checks over a connection handle."""

from typing import Any

from mongowrapper.config.logging import get_logger
from mongowrapper.resources.mongo.handle import ConnectionHandle
from mongowrapper.services.connection.errors import (
    ConcurrentAccessError,
    DatabaseConnectionError,
    HandleStateError,
)

logger = get_logger(__name__)


async def ping_mongo(handle: ConnectionHandle | None) -> dict[str, Any]:
    """
    Ping MongoDB through handle. Returns dict with 'ok' bool and optional 'error' string.
    Used for health checks; does not leak internal details.
    """
    if handle is None:
        return {"ok": False, "error": "not_configured"}
    try:
        await handle.ping()
        return {"ok": True}
    except HandleStateError as e:
        logger.warning("MongoDB handle not open", extra={"error": type(e).__name__})
        return {"ok": False, "error": "not_connected"}
    except ConcurrentAccessError:
        return {"ok": False, "error": "busy"}
    except DatabaseConnectionError as e:
        logger.warning("MongoDB ping failed", extra={"error": type(e).__name__})
        return {"ok": False, "error": "connection_failed"}
