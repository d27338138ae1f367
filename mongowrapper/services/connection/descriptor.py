"""
Connection URI derivation. Pure: no I/O, same ConnectionConfig -> same URI.

The URI is assembled from an ordered list of segments:
scheme + userinfo, authority (@host and optional database path), then query
parameters (TLS options, authMechanism, client options), each written once.
"""

from dataclasses import dataclass, field
from urllib.parse import quote

from mongowrapper.config.storage.models import (
    MONGOSERVER,
    MONGOSERVER_SVR,
    AuthMechanism,
    ConnectionConfig,
    ConnectionDescriptor,
)
from mongowrapper.services.connection.errors import InvalidConfigError

# Characters encodeURIComponent leaves alone, beyond those quote() never encodes
_URI_COMPONENT_SAFE = "!~*'()"


@dataclass
class UriSegments:
    """Ordered pieces of a connection URI before assembly."""

    base: str
    authority: str = ""
    query_open: bool = False
    has_path: bool = False
    params: list[tuple[str, str]] = field(default_factory=list)

    def assemble(self) -> str:
        uri = self.base + self.authority
        if not self.params:
            return uri
        query = "&".join(f"{key}={value}" for key, value in self.params)
        if self.query_open:
            return f"{uri}&{query}"
        if self.has_path:
            return f"{uri}?{query}"
        return f"{uri}/?{query}"


def encode_component(value: str) -> str:
    """Percent-encode a URI component with the encodeURIComponent character set."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def render_value(value: str | bool | int | float) -> str:
    """Render an option value for the query string. Booleans become true/false."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _userinfo(config: ConnectionConfig) -> str:
    username = config.username or ""
    if not username:
        if config.password:
            raise InvalidConfigError("A password was given without a username")
        return ""
    userinfo = encode_component(username)
    if config.password:
        userinfo += ":" + encode_component(config.password)
    return userinfo


def _authority(config: ConnectionConfig, segments: UriSegments, userinfo: str) -> None:
    at = "@" if userinfo else ""
    if config.login_database:
        segments.authority = f"{at}{config.host}/{config.login_database}"
        segments.has_path = True
    elif config.auth_source:
        segments.authority = f"{at}{config.host}/?authSource={config.auth_source}"
        segments.query_open = True
    else:
        segments.authority = f"{at}{config.host}"


def _auth_params(config: ConnectionConfig) -> list[tuple[str, str]]:
    mechanism = config.auth_mechanism
    if not mechanism:
        return []
    if config.tls_options:
        params = [
            (key, encode_component(value) if isinstance(value, str) else render_value(value))
            for key, value in config.tls_options.items()
        ]
        params.append(("authMechanism", encode_component(mechanism)))
        return params
    if AuthMechanism.recognizes(mechanism):
        return [("authMechanism", mechanism)]
    return [("authMechanism", AuthMechanism.DEFAULT.value)]


def _client_params(config: ConnectionConfig) -> list[tuple[str, str]]:
    if not config.client_options:
        return []
    return [(key, render_value(value)) for key, value in config.client_options.items()]


def build_segments(config: ConnectionConfig) -> UriSegments:
    """Return the ordered URI segments for a config without an explicit connection URI."""
    if config.username is None or not config.host:
        raise InvalidConfigError("Either connection_uri or both username and host are required")
    prefix = MONGOSERVER_SVR if config.svr_string else MONGOSERVER
    userinfo = _userinfo(config)
    segments = UriSegments(base=prefix + userinfo)
    _authority(config, segments, userinfo)
    segments.params.extend(_auth_params(config))
    segments.params.extend(_client_params(config))
    return segments


def build(config: ConnectionConfig) -> ConnectionDescriptor:
    """
    Derive the connection descriptor for config.
    A non-empty connection_uri is returned verbatim and every other field is ignored.
    Raises InvalidConfigError when neither connection_uri nor username and host are given.
    """
    if config.connection_uri:
        return ConnectionDescriptor(uri=config.connection_uri, uses_explicit_uri=True)
    return ConnectionDescriptor(uri=build_segments(config).assemble(), uses_explicit_uri=False)
