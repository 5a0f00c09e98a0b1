"""
MongoDB client lifecycle for a single demo run.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from mongo_auth_demo.core.exceptions import ConnectionFailedError
from mongo_auth_demo.models.plan import ConnectionPlan

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., AsyncIOMotorClient]


def create_client(
    plan: ConnectionPlan,
    client_factory: ClientFactory = AsyncIOMotorClient,
) -> AsyncIOMotorClient:
    """
    Create a MongoDB client from a connection plan.

    SRV records are resolved here, so DNS failures surface at creation.

    Raises:
        ConnectionFailedError: If the driver rejects the plan
    """
    try:
        return client_factory(plan.endpoint_uri, **plan.client_kwargs())
    except PyMongoError as e:
        raise ConnectionFailedError(f"Could not create client: {e}", plan.kind) from e


@asynccontextmanager
async def open_client(
    plan: ConnectionPlan,
    client_factory: ClientFactory = AsyncIOMotorClient,
) -> AsyncIterator[AsyncIOMotorClient]:
    """
    Open an authenticated client and close it on every exit path.

    The driver connects lazily; a ping forces server selection and
    authentication so failures are reported as connection errors.

    Raises:
        ConnectionFailedError: If the client cannot connect or authenticate
    """
    client = create_client(plan, client_factory)
    try:
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            raise ConnectionFailedError(f"Connection failed: {e}", plan.kind) from e
        logger.info(f"Connected using {plan.kind.value} authentication")
        yield client
    finally:
        client.close()
        logger.info("Connection closed")
