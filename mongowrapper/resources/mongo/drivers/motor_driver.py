"""Async MongoDB driver using Motor, with pool size and timeouts from settings."""

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import InvalidName, PyMongoError

from mongowrapper.config.logging import get_logger
from mongowrapper.config.storage.models import redact_uri
from mongowrapper.resources.mongo.drivers.base import BaseDriver
from mongowrapper.services.connection.errors import (
    DatabaseConnectionError,
    InvalidIdentifierError,
    InvalidNameError,
)

logger = get_logger(__name__)


def _translate_pymongo_error(e: Exception, context: str) -> DatabaseConnectionError:
    """Wrap PyMongo errors into a non-leaking DatabaseConnectionError."""
    logger.warning(
        "MongoDB operation failed",
        extra={"context": context, "error_type": type(e).__name__},
    )
    return DatabaseConnectionError(f"MongoDB unavailable: {context}", cause=e)


class MotorDriver(BaseDriver):
    """
    Motor-backed driver. AsyncIOMotorClient connects lazily, so connect_to pings the
    server before returning to surface unreachable hosts and bad credentials at open time.
    """

    def __init__(
        self,
        connect_timeout_ms: int = 5000,
        server_selection_timeout_ms: int = 5000,
        max_pool_size: int = 50,
    ):
        self._connect_timeout_ms = connect_timeout_ms
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._max_pool_size = max_pool_size

    @property
    def driver_name(self) -> str:
        return "motor"

    async def connect_to(self, uri: str) -> AsyncIOMotorClient:
        try:
            client = AsyncIOMotorClient(
                uri,
                connectTimeoutMS=self._connect_timeout_ms,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                maxPoolSize=self._max_pool_size,
            )
        except (PyMongoError, ValueError) as e:
            raise _translate_pymongo_error(e, "create client") from e
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            raise _translate_pymongo_error(e, "connect") from e
        logger.info(
            "MongoDB async client initialized",
            extra={"uri": redact_uri(uri), "max_pool_size": self._max_pool_size},
        )
        return client

    async def close_session(self, session: AsyncIOMotorClient) -> None:
        try:
            session.close()
        except PyMongoError as e:
            raise _translate_pymongo_error(e, "close client") from e
        logger.info("MongoDB async client closed")

    def get_database(self, session: AsyncIOMotorClient, name: str) -> AsyncIOMotorDatabase:
        try:
            return session[name]
        except InvalidName as e:
            raise InvalidNameError(f"Invalid database name: {name!r}", cause=e) from e

    def get_collection(self, database: AsyncIOMotorDatabase, name: str) -> AsyncIOMotorCollection:
        try:
            return database[name]
        except InvalidName as e:
            raise InvalidNameError(f"Invalid collection name: {name!r}", cause=e) from e

    def parse_identifier(self, value: str) -> ObjectId:
        # ObjectId(None) would generate a fresh id
        if value is None:
            raise InvalidIdentifierError("Not a valid ObjectId: None")
        try:
            return ObjectId(value)
        except (InvalidId, TypeError) as e:
            raise InvalidIdentifierError(f"Not a valid ObjectId: {value!r}", cause=e) from e

    async def ping(self, session: AsyncIOMotorClient) -> None:
        try:
            await session.admin.command("ping")
        except PyMongoError as e:
            raise _translate_pymongo_error(e, "ping") from e
