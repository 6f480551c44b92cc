"""
MongoDB connection management.

The sync runs entirely on asyncio, so only the async (motor) client is
provided. One client is shared per process; each sync run builds its own
BillStore on top of it.
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from nysync.config.settings import settings


_async_client: AsyncIOMotorClient | None = None


def get_async_client() -> AsyncIOMotorClient:
    """
    Get or create the asynchronous MongoDB client.

    Raises:
        ConfigurationError: if MONGODB_URI is not configured
    """
    global _async_client
    if _async_client is None:
        settings.require("MONGODB_URI")
        _async_client = AsyncIOMotorClient(settings.MONGODB_URI)
    return _async_client


def get_async_database() -> AsyncIOMotorDatabase:
    """Database holding bills, their child records and people."""
    client = get_async_client()
    return client[settings.MONGODB_DATABASE]


def close_async_client() -> None:
    """Close the shared client; the next call to get_async_client reconnects."""
    global _async_client
    if _async_client is not None:
        _async_client.close()
        _async_client = None


async def ping_database() -> bool:
    """
    Round-trip to the server before a sync starts writing.

    Returns:
        True when the server answers the ping

    Raises:
        ConfigurationError: if MONGODB_URI is not configured
        pymongo.errors.PyMongoError: if the server can't be reached
    """
    reply = await get_async_client().admin.command("ping")
    return bool(reply.get("ok"))
