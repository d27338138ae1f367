"""MongoDB connection configuration models. Read-only; no business logic."""

from enum import Enum
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MONGOSERVER = "mongodb://"
MONGOSERVER_SVR = "mongodb+srv://"


class AuthMechanism(str, Enum):
    """Authentication mechanisms written verbatim into the URI."""

    DEFAULT = "DEFAULT"
    SCRAM_256 = "SCRAM-SHA-256"
    SCRAM_1 = "SCRAM-SHA-1"
    TLS = "MONGODB-X509"

    @classmethod
    def recognizes(cls, value: str) -> bool:
        return any(member.value == value for member in cls)


class ConnectionConfig(BaseModel):
    """
    Structured input for URI derivation. Keys may be given in snake_case or in the
    camelCase used by static.json profiles (loginDatabase, authSource, tlsOptions, ...).
    Mapping order of tls_options and client_options is kept in the derived URI.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    connection_uri: str | None = Field(default=None, description="Complete URI; skips derivation")
    username: str | None = Field(default=None, description="Login user, percent-encoded in the URI")
    password: str | None = Field(default=None, description="Login password, percent-encoded in the URI")
    host: str | None = Field(default=None, description="host:port or comma-separated host list")
    login_database: str | None = Field(default=None, description="Database the user authenticates against")
    auth_source: str | None = Field(default=None, description="Used only when login_database is empty")
    auth_mechanism: str | None = Field(default=None, description="DEFAULT|SCRAM-SHA-256|SCRAM-SHA-1|MONGODB-X509")
    tls_options: dict[str, str | bool] | None = Field(
        default=None, description="TLS parameters, only written when auth_mechanism is set"
    )
    svr_string: bool = Field(default=False, description="Use mongodb+srv:// instead of mongodb://")
    client_options: dict[str, str | bool | int | float] | None = Field(
        default=None, description="Driver parameters appended as query parameters"
    )


class ConnectionDescriptor(BaseModel):
    """Derived connection endpoint. The uri embeds credentials; log redacted_uri instead."""

    model_config = ConfigDict(frozen=True)

    uri: str
    uses_explicit_uri: bool = False

    @property
    def redacted_uri(self) -> str:
        return redact_uri(self.uri)

    def with_appended_parameters(self, extra: str) -> "ConnectionDescriptor":
        """Return a copy whose uri has extra appended verbatim."""
        return ConnectionDescriptor(uri=self.uri + extra, uses_explicit_uri=self.uses_explicit_uri)


def redact_uri(uri: str) -> str:
    """Replace the password in a connection URI with ***. Unparseable input is fully masked."""
    try:
        parts = urlsplit(uri)
    except ValueError:
        return "***"
    userinfo, sep, hosts = parts.netloc.rpartition("@")
    if not sep or ":" not in userinfo:
        return uri
    user = userinfo.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{user}:***@{hosts}"))
