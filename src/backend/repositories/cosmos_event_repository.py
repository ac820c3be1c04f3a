"""
Cosmos DB Event repository.

Handles event CRUD operations using Azure Cosmos DB with embedded teams.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic_core import to_jsonable_python

from db.cosmos_session import (
    EVENTS_CONTAINER,
    create_item,
    delete_item,
    patch_item,
    query_items,
    read_item,
)
from models.cosmos_documents import EventDocument

logger = logging.getLogger(__name__)

# Fields an admin edit may touch. total_votes changes only through increment_total_votes.
UPDATABLE_FIELDS = frozenset({"name", "description", "teams", "start_date", "end_date", "is_active"})


class CosmosEventRepository:
    """Repository for event operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_id(self, event_id: str) -> Optional[EventDocument]:
        """Get an event by ID (direct point read - very efficient)."""
        data = await read_item(EVENTS_CONTAINER, event_id, partition_key=event_id)
        if data is None:
            return None
        return EventDocument(**data)

    async def get_by_slug(self, voting_slug: str) -> Optional[EventDocument]:
        """Get an event by its public voting slug (cross-partition query)."""
        query = """
            SELECT * FROM c
            WHERE c.voting_slug = @slug
        """
        results = await query_items(
            EVENTS_CONTAINER,
            query,
            parameters=[{"name": "@slug", "value": voting_slug}],
            max_items=1,
        )
        if not results:
            return None
        return EventDocument(**results[0])

    async def list_by_owner(self, admin_id: str) -> list[EventDocument]:
        """List every event created by an admin, newest first."""
        query = """
            SELECT * FROM c
            WHERE c.created_by = @admin_id
            ORDER BY c.created_at DESC
        """
        results = await query_items(
            EVENTS_CONTAINER,
            query,
            parameters=[{"name": "@admin_id", "value": admin_id}],
        )
        return [EventDocument(**r) for r in results]

    async def list_active(self) -> list[EventDocument]:
        """
        List events whose active flag is set.

        The time window is evaluated by the caller against the current clock,
        never by the query, so the open/closed decision is made on every read.
        """
        query = """
            SELECT * FROM c
            WHERE c.is_active = true
        """
        results = await query_items(EVENTS_CONTAINER, query)
        return [EventDocument(**r) for r in results]

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, event: EventDocument) -> EventDocument:
        """Persist a new event document."""
        await create_item(EVENTS_CONTAINER, event.model_dump(mode="json"))
        logger.info(f"Created event {event.id}: {event.name[:50]}")
        return event

    async def apply_update(self, event_id: str, fields: dict[str, Any]) -> Optional[EventDocument]:
        """
        Update selected fields with server-side ``set`` patches.

        Untouched fields, including a concurrently incremented total_votes,
        keep their stored values.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        updates = {**fields, "updated_at": datetime.now(timezone.utc)}
        operations = [
            {"op": "set", "path": f"/{field}", "value": to_jsonable_python(value)} for field, value in updates.items()
        ]

        data = await patch_item(EVENTS_CONTAINER, event_id, partition_key=event_id, operations=operations)
        if data is None:
            return None
        return EventDocument(**data)

    async def increment_total_votes(self, event_id: str) -> Optional[int]:
        """
        Atomically add one to the denormalized vote counter.

        Returns the new total, or None if the event has been deleted.
        """
        data = await patch_item(
            EVENTS_CONTAINER,
            event_id,
            partition_key=event_id,
            operations=[{"op": "incr", "path": "/total_votes", "value": 1}],
        )
        if data is None:
            logger.warning(f"Vote counter increment skipped, event {event_id} no longer exists")
            return None
        return int(data.get("total_votes", 0))

    async def delete(self, event_id: str) -> bool:
        """Delete an event document."""
        deleted = await delete_item(EVENTS_CONTAINER, event_id, partition_key=event_id)
        if deleted:
            logger.info(f"Deleted event {event_id}")
        return deleted
