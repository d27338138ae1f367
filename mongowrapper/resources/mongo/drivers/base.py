"""Base driver capability and contract. Handles depend on this, never on a concrete driver."""

from abc import ABC, abstractmethod
from typing import Any


class BaseDriver(ABC):
    """
    Abstract driver capability. Implementations own all network I/O.
    connect_to and close_session raise DatabaseConnectionError on driver failure;
    parse_identifier raises InvalidIdentifierError on malformed input.
    """

    @abstractmethod
    async def connect_to(self, uri: str) -> Any:
        """Open a session for uri and verify it is reachable. Returns the driver session."""
        ...

    @abstractmethod
    async def close_session(self, session: Any) -> None:
        """Release the session and its connections."""
        ...

    @abstractmethod
    def get_database(self, session: Any, name: str) -> Any:
        """Return the named database of a live session."""
        ...

    @abstractmethod
    def get_collection(self, database: Any, name: str) -> Any:
        """Return the named collection of a database."""
        ...

    @abstractmethod
    def parse_identifier(self, value: str) -> Any:
        """Convert a string to the driver's document identifier type."""
        ...

    @abstractmethod
    async def ping(self, session: Any) -> None:
        """Round-trip to the server on a live session."""
        ...

    @property
    @abstractmethod
    def driver_name(self) -> str:
        """Driver identifier, e.g. 'motor', 'mock'."""
        ...
