"""Build connection handles from settings. No module-level client; callers own their handles."""

from mongowrapper.config.logging import get_logger
from mongowrapper.config.settings import Settings
from mongowrapper.config.storage.mongo import get_connection_config, get_mongo_config
from mongowrapper.resources.mongo.drivers import BaseDriver, get_driver
from mongowrapper.resources.mongo.handle import ConnectionHandle
from mongowrapper.services.connection.descriptor import build
from mongowrapper.services.connection.errors import InvalidConfigError

logger = get_logger(__name__)


def create_driver(settings: Settings) -> BaseDriver:
    """Return the driver named by settings.mongo_driver. Raises InvalidConfigError if unknown."""
    cfg = get_mongo_config(settings)
    kwargs = {}
    if cfg["driver"] == "motor":
        kwargs = {
            "connect_timeout_ms": cfg["connect_timeout_ms"],
            "server_selection_timeout_ms": cfg["server_selection_timeout_ms"],
            "max_pool_size": cfg["max_pool_size"],
        }
    driver = get_driver(cfg["driver"], **kwargs)
    if driver is None:
        raise InvalidConfigError(f"Unknown MongoDB driver: {cfg['driver']!r}")
    return driver


def create_handle(settings: Settings, driver: BaseDriver | None = None) -> ConnectionHandle:
    """Derive the descriptor from settings and return an unopened handle for it."""
    try:
        descriptor = build(get_connection_config(settings))
    except ValueError as e:
        raise InvalidConfigError(str(e), cause=e) from e
    logger.info(
        "Connection descriptor built",
        extra={"uri": descriptor.redacted_uri, "explicit_uri": descriptor.uses_explicit_uri},
    )
    return ConnectionHandle(driver or create_driver(settings), descriptor)


async def open_default_handle(settings: Settings, driver: BaseDriver | None = None) -> ConnectionHandle:
    """
    Open a handle and select settings.mongo_database and settings.mongo_collection.
    If the selection fails the handle is closed before the error propagates.
    """
    cfg = get_mongo_config(settings)
    handle = create_handle(settings, driver)
    await handle.open()
    try:
        handle.select_database(cfg["database"])
        if cfg["collection"]:
            handle.select_collection(cfg["collection"])
    except Exception:
        await handle.close()
        raise
    return handle
