"""Environment-based application settings. Read-only; no business logic."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="mongowrapper", description="Service name")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Runtime environment"
    )
    log_level: str = Field(default="INFO", description="Log level name")

    # Server
    host: str = Field(default="0.0.0.0", description="Listen host")
    port: int = Field(default=1324, ge=1, le=65535, description="Listen port")
    server_ssl_cert_file: str = Field(default="", description="TLS certificate file served by the app")
    server_ssl_key_file: str = Field(default="", description="TLS private key file served by the app")

    # MongoDB profile (see config/storage/static for resolution)
    mongo_profile: str = Field(default="active", description="Connection profile name in static.json")
    mongo_connection_uri: str | None = Field(
        default=None, description="Complete connection URI; skips URI derivation when set"
    )
    mongo_username: str | None = Field(default=None, description="Overrides the profile username")
    mongo_password: str | None = Field(default=None, description="Overrides the profile password")
    mongo_host: str | None = Field(default=None, description="Overrides the profile host list")
    mongo_login_database: str | None = Field(default=None, description="Overrides the login database")
    mongo_auth_source: str | None = Field(default=None, description="Overrides the auth source")
    mongo_auth_mechanism: str | None = Field(default=None, description="Overrides the auth mechanism")
    mongo_svr_string: bool | None = Field(default=None, description="Use the mongodb+srv:// scheme")

    # MongoDB client
    mongo_driver: str = Field(default="motor", description="motor|mock")
    mongo_database: str = Field(default="isengart", description="Database selected after connecting")
    mongo_collection: str | None = Field(default=None, description="Collection selected after connecting")
    mongo_connect_timeout_ms: int = Field(default=5000, ge=100, description="Connection timeout (ms)")
    mongo_server_selection_timeout_ms: int = Field(
        default=5000, ge=100, description="Server selection timeout (ms)"
    )
    mongo_max_pool_size: int = Field(default=50, ge=1, le=500, description="Max connection pool size")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance. Use for app lifetime."""
    return Settings()
