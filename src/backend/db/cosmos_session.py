"""
Azure Cosmos DB session management for document storage.

Uses async Cosmos DB SDK with DefaultAzureCredential for RBAC authentication.
This module provides a unified client for all Cosmos DB operations.

Every helper below runs its SDK call under a timeout and retries transient
failures with exponential backoff. Once retries are exhausted the caller sees
StorageUnavailableError. Conflicts and not-found responses are never retried.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from azure.core.exceptions import ServiceRequestError, ServiceResponseError
from azure.cosmos.aio import ContainerProxy, CosmosClient, DatabaseProxy
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential

from core.config import settings
from core.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Container names
EVENTS_CONTAINER = "events"
VOTES_CONTAINER = "votes"
VOTERS_CONTAINER = "voters"
ADMINS_CONTAINER = "admins"
IDENTITY_LOOKUP_CONTAINER = "identity-lookup"

# Status codes worth another attempt: timeout, throttled, retry-with, server errors
TRANSIENT_STATUS_CODES = frozenset({408, 429, 449, 500, 503})
MAX_BACKOFF_SECONDS = 2.0

# Global client instances (lazy-initialized)
_cosmos_client: CosmosClient | None = None
_database: DatabaseProxy | None = None
_credential: DefaultAzureCredential | None = None


async def get_cosmos_client() -> CosmosClient:
    """
    Get or create the Cosmos DB client.

    Supports two authentication modes:
    1. Connection string (for local development with Cosmos DB Emulator)
    2. DefaultAzureCredential/RBAC (for Azure deployment)

    The client is singleton and reused across requests.
    """
    global _cosmos_client, _credential

    if _cosmos_client is None:
        if settings.AZURE_COSMOS_CONNECTION_STRING:
            # Format: AccountEndpoint=https://...;AccountKey=...;
            conn_parts = dict(
                part.split("=", 1) for part in settings.AZURE_COSMOS_CONNECTION_STRING.split(";") if "=" in part
            )
            endpoint = conn_parts.get("AccountEndpoint", "")
            key = conn_parts.get("AccountKey", "")

            if not endpoint or not key:
                raise ValueError("AZURE_COSMOS_CONNECTION_STRING must contain AccountEndpoint and AccountKey")

            _cosmos_client = CosmosClient(
                url=endpoint,
                credential=key,
                connection_verify=not settings.AZURE_COSMOS_DISABLE_SSL,
            )
            logger.info(
                f"Initialized Cosmos DB client for {endpoint} (connection string mode, "
                f"SSL verification: {not settings.AZURE_COSMOS_DISABLE_SSL})"
            )
        else:
            if not settings.AZURE_COSMOS_ENDPOINT:
                raise ValueError("Either AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING must be set")

            _credential = DefaultAzureCredential()
            _cosmos_client = CosmosClient(
                url=settings.AZURE_COSMOS_ENDPOINT,
                credential=_credential,
            )
            logger.info(f"Initialized Cosmos DB client for {settings.AZURE_COSMOS_ENDPOINT} (RBAC mode)")

    return _cosmos_client


async def get_database() -> DatabaseProxy:
    """Get the Cosmos DB database proxy."""
    global _database

    if _database is None:
        client = await get_cosmos_client()
        _database = client.get_database_client(settings.AZURE_COSMOS_DATABASE)
        logger.info(f"Connected to database: {settings.AZURE_COSMOS_DATABASE}")

    return _database


async def get_container(container_name: str) -> ContainerProxy:
    """Get a container proxy for the specified container."""
    database = await get_database()
    return database.get_container_client(container_name)


async def init_cosmos() -> None:
    """Warm up the client so configuration errors surface at startup."""
    await get_database()


async def close_cosmos() -> None:
    """
    Close Cosmos DB connections.

    Should be called during application shutdown.
    """
    global _cosmos_client, _database, _credential

    if _cosmos_client is not None:
        await _cosmos_client.close()
        _cosmos_client = None
        _database = None
        logger.info("Closed Cosmos DB client")

    if _credential is not None:
        await _credential.close()
        _credential = None


# ============================================================================
# Timeout and Retry
# ============================================================================


def is_transient(exc: BaseException) -> bool:
    """Classify an SDK failure as worth retrying."""
    if isinstance(exc, (asyncio.TimeoutError, ServiceRequestError, ServiceResponseError)):
        return True
    if isinstance(exc, CosmosHttpResponseError):
        return exc.status_code in TRANSIENT_STATUS_CODES
    return False


async def run_with_retry(operation: Callable[[], Awaitable[T]], description: str) -> T:
    """
    Run a store call with a per-attempt timeout and bounded exponential backoff.

    Non-transient errors (conflict, not found, bad request) propagate untouched.
    """
    attempts = max(1, settings.COSMOS_RETRY_ATTEMPTS)
    backoff_seconds = settings.COSMOS_RETRY_BACKOFF_SECONDS

    for attempt in range(1, attempts + 1):
        try:
            return await asyncio.wait_for(operation(), timeout=settings.COSMOS_TIMEOUT_SECONDS)
        except Exception as e:
            if not is_transient(e):
                raise
            if attempt == attempts:
                logger.error(f"Cosmos DB {description} failed after {attempts} attempts: {e!r}")
                raise StorageUnavailableError(f"Document store unavailable during {description}") from e
            logger.warning(
                f"Cosmos DB {description} attempt {attempt}/{attempts} failed ({e!r}), "
                f"retrying in {backoff_seconds:.2f}s"
            )
            await asyncio.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, MAX_BACKOFF_SECONDS)

    raise StorageUnavailableError(f"Document store unavailable during {description}")


# ============================================================================
# Utility Functions for Common Operations
# ============================================================================


async def create_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    """
    Create a new item in the specified container.

    Raises CosmosResourceExistsError when an item with the same id already
    exists in the same logical partition.
    """
    container = await get_container(container_name)
    return await run_with_retry(lambda: container.create_item(body=item), f"create in {container_name}")


async def read_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> dict[str, Any] | None:
    """Read an item by ID and partition key. Returns None if not found."""
    container = await get_container(container_name)
    try:
        return await run_with_retry(
            lambda: container.read_item(item=item_id, partition_key=partition_key),
            f"read from {container_name}",
        )
    except CosmosResourceNotFoundError:
        return None


async def upsert_item(container_name: str, item: dict[str, Any]) -> dict[str, Any]:
    """Create or update an item in the specified container."""
    container = await get_container(container_name)
    return await run_with_retry(lambda: container.upsert_item(body=item), f"upsert in {container_name}")


async def patch_item(
    container_name: str,
    item_id: str,
    partition_key: str,
    operations: list[dict[str, Any]],
) -> dict[str, Any] | None:
    """
    Apply server-side patch operations (e.g. atomic ``incr``) to one item.

    Returns the patched item, or None if the item no longer exists.
    """
    container = await get_container(container_name)
    try:
        return await run_with_retry(
            lambda: container.patch_item(
                item=item_id,
                partition_key=partition_key,
                patch_operations=operations,
            ),
            f"patch in {container_name}",
        )
    except CosmosResourceNotFoundError:
        return None


async def delete_item(
    container_name: str,
    item_id: str,
    partition_key: str,
) -> bool:
    """Delete an item by ID and partition key. Returns False if it was already gone."""
    container = await get_container(container_name)
    try:
        await run_with_retry(
            lambda: container.delete_item(item=item_id, partition_key=partition_key),
            f"delete from {container_name}",
        )
        return True
    except CosmosResourceNotFoundError:
        return False


async def query_items(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
    max_items: int | None = None,
) -> list[dict[str, Any]]:
    """
    Query items using SQL-like syntax.

    Example:
        results = await query_items(
            'events',
            'SELECT * FROM c WHERE c.voting_slug = @slug',
            parameters=[{'name': '@slug', 'value': slug}]
        )
    """
    container = await get_container(container_name)

    # enable_cross_partition_query is implied when no partition_key is given
    query_kwargs: dict[str, Any] = {
        "query": query,
    }

    if parameters:
        query_kwargs["parameters"] = parameters

    if partition_key:
        query_kwargs["partition_key"] = partition_key

    if max_items:
        query_kwargs["max_item_count"] = max_items

    async def collect() -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        async for item in container.query_items(**query_kwargs):
            items.append(item)
            if max_items and len(items) >= max_items:
                break
        return items

    return await run_with_retry(collect, f"query on {container_name}")


async def query_count(
    container_name: str,
    query: str,
    parameters: list[dict[str, Any]] | None = None,
    partition_key: str | None = None,
) -> int:
    """
    Execute a COUNT query and return the integer result.

    This is a convenience wrapper for queries using SELECT VALUE COUNT(1).
    """
    results = await query_items(container_name, query, parameters, partition_key)
    if results:
        result = results[0]
        if isinstance(result, (int, float)):
            return int(result)
    return 0
