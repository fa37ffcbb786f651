"""MongoDB client wrapper with an explicit open/close lifecycle.

A single Database instance is built by the service container and handed to
every repository. Nothing in the application reaches for a module-level
connection.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient

from .exceptions import StorageError
from .logging import ContextLogger

logger = ContextLogger(__name__)


class Database:
    """Owns the driver client and exposes the application collections.

    Args:
        uri: MongoDB connection string. Ignored when ``client`` is given.
        name: Database name.
        client: Pre-built async client (used by tests to inject an
            in-memory client).
        use_transactions: Run ``transaction()`` blocks inside a MongoDB
            multi-document transaction. Requires a replica set.
    """

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        name: str = "snapgram",
        client: Any = None,
        use_transactions: bool = False,
    ) -> None:
        self.uri = uri
        self.name = name
        self.use_transactions = use_transactions
        self._client = client
        self._owns_client = client is None
        self._db: Any = None

    @property
    def is_open(self) -> bool:
        return self._db is not None

    async def open(self) -> None:
        """Connect (if needed), select the database and ensure indexes."""
        if self.is_open:
            return
        if self._client is None:
            self._client = AsyncIOMotorClient(self.uri, tz_aware=True)
        self._db = self._client[self.name]
        await self._db.users.create_index("username", unique=True)
        logger.info(
            "Database opened",
            extra={"database": self.name, "transactions": self.use_transactions},
        )

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None
        self._db = None
        logger.info("Database closed", extra={"database": self.name})

    async def ping(self) -> bool:
        """Return True when the server answers a ping."""
        if not self.is_open:
            return False
        await self._db.command("ping")
        return True

    def _collection(self, name: str) -> Any:
        if not self.is_open:
            raise StorageError("Database is not open")
        return self._db[name]

    @property
    def users(self) -> Any:
        return self._collection("users")

    @property
    def posts(self) -> Any:
        return self._collection("posts")

    @property
    def comments(self) -> Any:
        return self._collection("comments")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Any]:
        """Yield a session bound to a transaction, or None when disabled.

        Repository calls accept the yielded value as their ``session``
        argument, so the same code runs with and without transactions.
        """
        if not self.use_transactions:
            yield None
            return

        async with await self._client.start_session() as session:
            async with session.start_transaction():
                yield session
