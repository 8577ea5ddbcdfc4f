"""Database connection and utilities"""
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from typing import Callable, Optional
import asyncio
import logging

from chatbot_backend.config import Settings
from chatbot_backend.repositories.base import ensure_indexes
from chatbot_backend.utils.errors import StorageUnavailable

logger = logging.getLogger(__name__)

DISCONNECTED = "disconnected"
CONNECTING = "connecting"
CONNECTED = "connected"


class ConnectionManager:
    """
    Lazily opens and verifies the single MongoDB connection of this process.

    Every request path that touches storage goes through ensure_connection(),
    so a cold serverless instance connects on its first request and a warm one
    pays nothing. The pool is capped at one connection: the platform scales by
    running more instances, not by concurrency inside one.
    """

    def __init__(self, settings: Settings, client_factory: Optional[Callable] = None):
        self.settings = settings
        self._client_factory = client_factory or AsyncIOMotorClient
        self._client = None
        self._db: Optional[AsyncIOMotorDatabase] = None
        self.state = DISCONNECTED

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise StorageUnavailable("Database connection has not been established")
        return self._db

    async def ensure_connection(self) -> bool:
        """
        Make sure the connection is up.

        Returns:
            True once connected

        Raises:
            StorageUnavailable: If the database cannot be reached within the
                configured timeouts, or a concurrent connect did not finish
                within the wait interval
        """
        if self.state == CONNECTED:
            return True

        if self.state == CONNECTING:
            # Another request is connecting; wait once instead of racing it
            await asyncio.sleep(self.settings.db_connect_wait_seconds)
            if self.state == CONNECTED:
                return True
            raise StorageUnavailable("Database connection is still being established")

        return await self._connect()

    async def _connect(self) -> bool:
        self.state = CONNECTING
        client = None
        try:
            client = self._client_factory(
                self.settings.mongodb_uri,
                maxPoolSize=1,
                serverSelectionTimeoutMS=self.settings.db_server_selection_timeout_ms,
                connectTimeoutMS=self.settings.db_server_selection_timeout_ms,
                socketTimeoutMS=self.settings.db_socket_timeout_ms,
            )
            # Database named in the URI, else MONGODB_DB
            name = client.get_default_database(default=self.settings.mongodb_db).name
            db = client[name]

            await db.command("ping")
            await ensure_indexes(db)
        except Exception as e:
            logger.error(f"MongoDB connection error: {e}")
            if client is not None:
                client.close()
            self.state = DISCONNECTED
            if isinstance(e, PyMongoError):
                raise StorageUnavailable() from e
            raise

        self._client = client
        self._db = db
        self.state = CONNECTED
        logger.info(f"MongoDB connected successfully (database: {db.name})")
        return True

    def close(self):
        """Release the client, if any"""
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed")
        self._client = None
        self._db = None
        self.state = DISCONNECTED


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.connection_manager


async def get_database(request: Request) -> AsyncIOMotorDatabase:
    """FastAPI dependency: the connected database, connecting first if needed"""
    manager = get_connection_manager(request)
    await manager.ensure_connection()
    return manager.database
