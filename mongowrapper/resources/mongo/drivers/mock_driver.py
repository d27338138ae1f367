"""Mock driver for tests and local runs without a server. Deterministic, in memory."""

import re
from dataclasses import dataclass, field

from mongowrapper.resources.mongo.drivers.base import BaseDriver
from mongowrapper.services.connection.errors import (
    DatabaseConnectionError,
    InvalidIdentifierError,
    InvalidNameError,
)

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
# Same characters the server refuses in database names
_BAD_DATABASE_CHARS = frozenset(" ./\\\"$")


@dataclass
class MockCollection:
    database: str
    name: str


@dataclass
class MockDatabase:
    name: str
    collections: dict[str, MockCollection] = field(default_factory=dict)


@dataclass
class MockSession:
    uri: str
    closed: bool = False
    databases: dict[str, MockDatabase] = field(default_factory=dict)


class MockDriver(BaseDriver):
    """
    Records every session it opens. Any uri containing one of unreachable_hosts fails to
    connect, as does every connect while fail_connect is set.
    """

    def __init__(self, unreachable_hosts: tuple[str, ...] = (), fail_connect: bool = False):
        self.unreachable_hosts = unreachable_hosts
        self.fail_connect = fail_connect
        self.sessions: list[MockSession] = []

    @property
    def driver_name(self) -> str:
        return "mock"

    async def connect_to(self, uri: str) -> MockSession:
        if self.fail_connect or any(host in uri for host in self.unreachable_hosts):
            raise DatabaseConnectionError("MongoDB unavailable: connect")
        session = MockSession(uri=uri)
        self.sessions.append(session)
        return session

    async def close_session(self, session: MockSession) -> None:
        if session.closed:
            raise DatabaseConnectionError("MongoDB unavailable: session already released")
        session.closed = True

    def get_database(self, session: MockSession, name: str) -> MockDatabase:
        if not name or _BAD_DATABASE_CHARS.intersection(name):
            raise InvalidNameError(f"Invalid database name: {name!r}")
        return session.databases.setdefault(name, MockDatabase(name=name))

    def get_collection(self, database: MockDatabase, name: str) -> MockCollection:
        if not name or "$" in name:
            raise InvalidNameError(f"Invalid collection name: {name!r}")
        return database.collections.setdefault(name, MockCollection(database=database.name, name=name))

    def parse_identifier(self, value: str) -> str:
        if not isinstance(value, str) or not _OBJECT_ID_RE.match(value):
            raise InvalidIdentifierError(f"Not a valid ObjectId: {value!r}")
        return value.lower()

    async def ping(self, session: MockSession) -> None:
        if session.closed or self.fail_connect:
            raise DatabaseConnectionError("MongoDB unavailable: ping")

    @property
    def open_sessions(self) -> list[MockSession]:
        return [s for s in self.sessions if not s.closed]
