"""
Async connection handle: one driver session with at most one selected database and
collection. States are UNOPENED -> OPEN -> CLOSED; open() and close() are the only
transitions, and every other operation except to_object_id() needs OPEN.

A handle is not meant for concurrent use. Overlapping mutating operations on the same
handle fail with ConcurrentAccessError instead of interleaving.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator

from mongowrapper.config.logging import get_logger
from mongowrapper.config.storage.models import ConnectionDescriptor
from mongowrapper.resources.mongo.drivers.base import BaseDriver
from mongowrapper.services.connection.errors import (
    AlreadyClosedError,
    AlreadyOpenError,
    ConcurrentAccessError,
    DatabaseConnectionError,
    InvalidConfigError,
    NoDatabaseSelectedError,
    NotConnectedError,
)

logger = get_logger(__name__)


class HandleState(str, Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class ConnectionHandle:
    """Lifecycle wrapper around a driver session, created from a ConnectionDescriptor."""

    def __init__(self, driver: BaseDriver, descriptor: ConnectionDescriptor | None = None):
        self._driver = driver
        self._descriptor = descriptor
        self._state = HandleState.UNOPENED
        self._client: Any = None
        self._database: Any = None
        self._database_name: str | None = None
        self._collection: Any = None
        self._collection_name: str | None = None
        self._busy: str | None = None

    async def __aenter__(self) -> "ConnectionHandle":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._state is HandleState.OPEN:
            await self.close()

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def descriptor(self) -> ConnectionDescriptor | None:
        return self._descriptor

    @property
    def uri(self) -> str | None:
        """Current connection URI. Contains credentials; do not log it."""
        return self._descriptor.uri if self._descriptor else None

    @property
    def client(self) -> Any:
        return self._client

    @property
    def database(self) -> Any:
        return self._database

    @property
    def database_name(self) -> str | None:
        return self._database_name

    @property
    def collection(self) -> Any:
        return self._collection

    @property
    def collection_name(self) -> str | None:
        return self._collection_name

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if self._busy is not None:
            raise ConcurrentAccessError(f"Cannot {operation} while {self._busy} is in progress")
        self._busy = operation
        try:
            yield
        finally:
            self._busy = None

    def _require_open(self) -> None:
        if self._state is HandleState.UNOPENED:
            raise NotConnectedError("Connection handle is not open")
        if self._state is HandleState.CLOSED:
            raise AlreadyClosedError("Connection handle is closed")

    def _mark_closed(self) -> None:
        self._state = HandleState.CLOSED
        self._client = None
        self._database = None
        self._collection = None

    async def _connect(self, descriptor: ConnectionDescriptor) -> Any:
        try:
            return await self._driver.connect_to(descriptor.uri)
        except DatabaseConnectionError:
            raise
        except Exception as e:
            raise DatabaseConnectionError("Failed to connect to MongoDB", cause=e) from e

    async def _release(self) -> None:
        try:
            await self._driver.close_session(self._client)
        except DatabaseConnectionError:
            raise
        except Exception as e:
            raise DatabaseConnectionError("Failed to close MongoDB session", cause=e) from e

    async def open(self, descriptor: ConnectionDescriptor | None = None) -> None:
        """
        Open a driver session for descriptor, or for the descriptor given at construction.
        Raises DatabaseConnectionError when the driver cannot connect; nothing is retried.
        """
        with self._exclusive("open"):
            if self._state is HandleState.OPEN:
                raise AlreadyOpenError("Connection handle is already open")
            if self._state is HandleState.CLOSED:
                raise AlreadyClosedError("Connection handle is closed")
            descriptor = descriptor or self._descriptor
            if descriptor is None:
                raise InvalidConfigError("No connection descriptor to open")
            self._client = await self._connect(descriptor)
            self._descriptor = descriptor
            self._state = HandleState.OPEN
            logger.info(
                "Connection handle opened",
                extra={"uri": descriptor.redacted_uri, "driver": self._driver.driver_name},
            )

    def select_database(self, name: str) -> None:
        """Select the database by name, replacing the previous one and its collection."""
        with self._exclusive("select database"):
            self._require_open()
            self._database = self._driver.get_database(self._client, name)
            self._database_name = name
            self._collection = None
            self._collection_name = None

    def select_collection(self, name: str) -> None:
        """Select a collection of the current database, replacing the previous one."""
        if self._state is HandleState.CLOSED:
            raise AlreadyClosedError("Connection handle is closed")
        if self._database is None:
            raise NoDatabaseSelectedError("Select a database before selecting a collection")
        self._collection = self._driver.get_collection(self._database, name)
        self._collection_name = name

    async def close(self) -> None:
        """Close the session. A second call raises AlreadyClosedError."""
        with self._exclusive("close"):
            self._require_open()
            try:
                await self._release()
            finally:
                self._mark_closed()
            logger.info("Connection handle closed")

    async def reopen_with_appended_parameters(self, extra: str) -> None:
        """
        Close the session, append extra verbatim to the URI, and open a new session.
        The previously selected database and collection are selected again on success.
        If the old session cannot be released or the new one opened, the handle ends up CLOSED.
        """
        with self._exclusive("reopen"):
            self._require_open()
            descriptor = self._descriptor.with_appended_parameters(extra)
            try:
                await self._release()
                self._client = None
                self._client = await self._connect(descriptor)
            except DatabaseConnectionError:
                self._mark_closed()
                logger.warning("Connection handle reopen failed", extra={"uri": descriptor.redacted_uri})
                raise
            self._descriptor = descriptor
            if self._database_name is not None:
                self._database = self._driver.get_database(self._client, self._database_name)
            if self._collection_name is not None:
                self._collection = self._driver.get_collection(self._database, self._collection_name)
            logger.info("Connection handle reopened", extra={"uri": descriptor.redacted_uri})

    async def ping(self) -> None:
        """Round-trip to the server. Raises DatabaseConnectionError when unreachable."""
        self._require_open()
        if self._busy is not None:
            raise ConcurrentAccessError(f"Cannot ping while {self._busy} is in progress")
        await self._driver.ping(self._client)

    def to_object_id(self, value: str) -> Any:
        """Convert value to the driver's identifier type. Raises InvalidIdentifierError."""
        return self._driver.parse_identifier(value)

    def debug_connection_string(self) -> str | None:
        """Log and return the full connection URI. Sensitive: credentials are embedded."""
        logger.debug("Current used connection string", extra={"uri": self.uri})
        return self.uri
