import asyncio
import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from rxledger.db.store import BalanceStore

logger = logging.getLogger(__name__)


class MongoBalanceStore(BalanceStore):
    """
    BalanceStore backed by a single MongoDB collection.

    Documents are {"_id": key, "value": value}. Commands are serialized
    in-process; with use_transactions the body also runs inside a client
    session transaction (replica set required).
    """

    def __init__(self, client: AsyncIOMotorClient, collection: AsyncIOMotorCollection, use_transactions: bool = False):
        self.client = client
        self.collection = collection
        self.use_transactions = use_transactions
        self._lock = asyncio.Lock()
        self._session = None

    async def get(self, key: str) -> Optional[Any]:
        doc = await self.collection.find_one({"_id": key}, session=self._session)
        if not doc:
            return None
        return doc["value"]

    async def set(self, key: str, value: Any) -> None:
        await self.collection.replace_one(
            {"_id": key},
            {"_id": key, "value": value},
            upsert=True,
            session=self._session
        )

    async def delete(self, key: str) -> bool:
        result = await self.collection.delete_one({"_id": key}, session=self._session)
        return result.deleted_count > 0

    async def count(self) -> int:
        return await self.collection.count_documents({}, session=self._session)

    async def enumerate(self, prefix: str) -> List[Any]:
        cursor = self.collection.find(
            {"_id": {"$regex": "^" + re.escape(prefix)}},
            session=self._session
        ).sort("_id", 1)
        docs = await cursor.to_list(None)
        return [doc["value"] for doc in docs]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            if not self.use_transactions:
                yield
                return

            async with await self.client.start_session() as session:
                async with session.start_transaction():
                    self._session = session
                    try:
                        yield
                    finally:
                        self._session = None

    async def close(self) -> None:
        self.client.close()
        logger.info("Disconnected from MongoDB")


async def connect_to_mongo(url: str, database_name: str, collection_name: str, use_transactions: bool = False) -> MongoBalanceStore:
    """Connect to MongoDB and return the ledger store."""
    client = AsyncIOMotorClient(url)
    collection = client[database_name][collection_name]
    logger.info("Connected to MongoDB: %s.%s", database_name, collection_name)
    return MongoBalanceStore(client, collection, use_transactions=use_transactions)
