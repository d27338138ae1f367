"""MongoDB connection config (read from settings). Read-only; no business logic."""

from typing import Any

from mongowrapper.config.settings import Settings
from mongowrapper.config.storage.models import ConnectionConfig
from mongowrapper.config.storage.static import resolve_connection_config


def get_connection_config(settings: Settings) -> ConnectionConfig:
    """Return the ConnectionConfig for settings: the selected profile with MONGO_* overrides applied."""
    overrides = {
        "connection_uri": settings.mongo_connection_uri,
        "username": settings.mongo_username,
        "password": settings.mongo_password,
        "host": settings.mongo_host,
        "login_database": settings.mongo_login_database,
        "auth_source": settings.mongo_auth_source,
        "auth_mechanism": settings.mongo_auth_mechanism,
        "svr_string": settings.mongo_svr_string,
    }
    return resolve_connection_config(settings.mongo_profile, overrides)


def get_mongo_config(settings: Settings) -> dict[str, Any]:
    """Return MongoDB client parameters from settings for use by drivers and the app."""
    return {
        "driver": settings.mongo_driver,
        "database": settings.mongo_database,
        "collection": settings.mongo_collection,
        "connect_timeout_ms": settings.mongo_connect_timeout_ms,
        "server_selection_timeout_ms": settings.mongo_server_selection_timeout_ms,
        "max_pool_size": settings.mongo_max_pool_size,
    }
