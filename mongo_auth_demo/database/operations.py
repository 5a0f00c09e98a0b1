"""
Database operations run after authenticating, to show the connection works.
"""
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from mongo_auth_demo.core.exceptions import OperationError
from mongo_auth_demo.models.operation_log import Steps


class DatabaseOperations:
    """Thin async helpers over an authenticated client."""

    def __init__(self, client: AsyncIOMotorClient):
        self.client = client

    async def list_databases(self) -> list[str]:
        """List database names visible to the authenticated user."""
        try:
            return await self.client.list_database_names()
        except PyMongoError as e:
            raise OperationError(f"Failed to list databases: {e}", Steps.DATABASES) from e

    async def list_collections(self, database_name: str) -> list[str]:
        """List collection names in a database."""
        try:
            return await self.client[database_name].list_collection_names()
        except PyMongoError as e:
            raise OperationError(f"Failed to list collections: {e}", Steps.COLLECTIONS) from e

    async def insert_test_document(
        self,
        database_name: str,
        collection_name: str,
        document: dict[str, Any],
    ) -> Any:
        """
        Insert a document and return its id.

        The driver sets `_id` on the passed document.
        """
        try:
            result = await self.client[database_name][collection_name].insert_one(document)
            return result.inserted_id
        except PyMongoError as e:
            raise OperationError(
                f"Failed to insert document: {e}", Steps.INSERTED_DOCUMENT
            ) from e

    async def get_sample_documents(
        self,
        database_name: str,
        collection_name: str,
        limit: int = 5,
    ) -> list[dict[str, Any]]:
        """Fetch up to `limit` documents from a collection."""
        try:
            cursor = self.client[database_name][collection_name].find({}).limit(limit)
            return await cursor.to_list(length=limit)
        except PyMongoError as e:
            raise OperationError(
                f"Failed to get sample documents: {e}", Steps.SAMPLE_DOCUMENTS
            ) from e

    async def get_database_stats(self, database_name: str) -> dict[str, Any]:
        """Run dbStats on a database."""
        try:
            return await self.client[database_name].command("dbstats")
        except PyMongoError as e:
            raise OperationError(f"Failed to get database stats: {e}", Steps.STATS) from e
