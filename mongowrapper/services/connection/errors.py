"""Error taxonomy for URI derivation and connection handles."""


class MongoWrapperError(Exception):
    """Base error. cause holds the driver exception when one was wrapped."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class InvalidConfigError(MongoWrapperError):
    """Raised when a ConnectionConfig has neither a connection URI nor username and host."""


class InvalidNameError(InvalidConfigError):
    """Raised when the driver rejects a database or collection name."""


class DatabaseConnectionError(MongoWrapperError):
    """Raised when the driver fails to open, close, or reopen a session. Not retried."""


class HandleStateError(MongoWrapperError):
    """Raised when a handle operation is invalid in the handle's current state."""


class NotConnectedError(HandleStateError):
    """Raised when a handle is used before open()."""


class AlreadyOpenError(HandleStateError):
    """Raised when open() is called on a handle that is already open."""


class AlreadyClosedError(HandleStateError):
    """Raised when a handle is used after close()."""


class NoDatabaseSelectedError(HandleStateError):
    """Raised when a collection is selected before any database."""


class InvalidIdentifierError(MongoWrapperError):
    """Raised when a string cannot be parsed into the driver's identifier type."""


class ConcurrentAccessError(MongoWrapperError):
    """Raised when two mutating operations overlap on the same handle."""
