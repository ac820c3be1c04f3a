"""
Cosmos DB Vote repository.

The vote ledger. Partition key is event_id for efficient per-event scans, and
the document id is the voter id, so the store itself rejects a second vote
for the same (event, voter) pair.
"""

import logging
from typing import Optional

from azure.cosmos.exceptions import CosmosResourceExistsError

from db.cosmos_session import (
    VOTES_CONTAINER,
    create_item,
    delete_item,
    query_count,
    query_items,
    read_item,
)
from models.cosmos_documents import VoteDocument

logger = logging.getLogger(__name__)


class CosmosVoteRepository:
    """Repository for vote ledger operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get(self, event_id: str, voter_id: str) -> Optional[VoteDocument]:
        """Get a voter's vote for an event (point read)."""
        data = await read_item(VOTES_CONTAINER, voter_id, partition_key=event_id)
        if data is None:
            return None
        return VoteDocument(**data)

    async def list_for_event(self, event_id: str) -> list[VoteDocument]:
        """Get every vote cast in an event (single-partition scan)."""
        query = """
            SELECT * FROM c
            WHERE c.event_id = @event_id
        """
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@event_id", "value": event_id}],
            partition_key=event_id,
        )
        return [VoteDocument(**r) for r in results]

    async def list_for_voter(self, voter_id: str) -> list[VoteDocument]:
        """
        Get every vote a voter has cast, newest first.

        Note: This is a cross-partition query.
        """
        query = """
            SELECT * FROM c
            WHERE c.voter_id = @voter_id
            ORDER BY c.voted_at DESC
        """
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@voter_id", "value": voter_id}],
        )
        return [VoteDocument(**r) for r in results]

    async def get_team_counts(self, event_id: str) -> dict[str, int]:
        """Get vote counts keyed by team id for an event."""
        query = """
            SELECT c.team_id, COUNT(1) as count FROM c
            WHERE c.event_id = @event_id
            GROUP BY c.team_id
        """
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@event_id", "value": event_id}],
            partition_key=event_id,
        )

        counts: dict[str, int] = {}
        for row in results:
            counts[row["team_id"]] = int(row["count"])
        return counts

    async def list_recent_for_events(self, event_ids: list[str], limit: int = 10) -> list[VoteDocument]:
        """Get the most recent votes across a set of events."""
        if not event_ids:
            return []
        query = """
            SELECT * FROM c
            WHERE ARRAY_CONTAINS(@event_ids, c.event_id)
            ORDER BY c.voted_at DESC
            OFFSET 0 LIMIT @limit
        """
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[
                {"name": "@event_ids", "value": event_ids},
                {"name": "@limit", "value": limit},
            ],
        )
        return [VoteDocument(**r) for r in results]

    async def count_all(self) -> int:
        """
        Count votes across all events.

        Note: This is a cross-partition query - use sparingly.
        """
        return await query_count(VOTES_CONTAINER, "SELECT VALUE COUNT(1) FROM c")

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def create(self, vote: VoteDocument) -> Optional[VoteDocument]:
        """
        Insert a vote if the (event, voter) pair has none yet.

        Returns None when the store reports the pair already exists.
        """
        try:
            await create_item(VOTES_CONTAINER, vote.model_dump(mode="json"))
        except CosmosResourceExistsError:
            logger.debug(f"Vote for voter {vote.voter_id} in event {vote.event_id} already exists")
            return None
        logger.debug(f"Created vote for event {vote.event_id}")
        return vote

    async def delete_for_event(self, event_id: str) -> int:
        """Delete every vote in an event's partition. Returns how many were removed."""
        query = """
            SELECT c.id FROM c
            WHERE c.event_id = @event_id
        """
        results = await query_items(
            VOTES_CONTAINER,
            query,
            parameters=[{"name": "@event_id", "value": event_id}],
            partition_key=event_id,
        )

        deleted = 0
        for row in results:
            if await delete_item(VOTES_CONTAINER, row["id"], partition_key=event_id):
                deleted += 1

        logger.info(f"Deleted {deleted} votes for event {event_id}")
        return deleted
