"""
Cosmos DB Voter repository.

Voters are created lazily on first login and found again through the
identity-lookup container (by display name or by email).
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from db.cosmos_session import (
    VOTERS_CONTAINER,
    create_item,
    delete_item,
    patch_item,
    query_count,
    query_items,
    read_item,
)
from models.cosmos_documents import VoterDocument
from repositories import identity_lookup

logger = logging.getLogger(__name__)


class CosmosVoterRepository:
    """Repository for voter operations using Cosmos DB."""

    # ========================================================================
    # Read Operations
    # ========================================================================

    async def get_by_id(self, voter_id: str) -> Optional[VoterDocument]:
        """Get a voter by ID (direct point read - very efficient)."""
        data = await read_item(VOTERS_CONTAINER, voter_id, partition_key=voter_id)
        if data is None:
            return None
        return VoterDocument(**data)

    async def get_by_login(self, key: str) -> Optional[VoterDocument]:
        """
        Get a voter by login key using secondary index lookup.

        Two-step process:
        1. Look up voter_id from identity-lookup container
        2. Point read voter from voters container
        """
        voter_id = await identity_lookup.resolve(key)
        if not voter_id:
            return None
        return await self.get_by_id(voter_id)

    async def list_all(self) -> list[VoterDocument]:
        """List every voter, newest first."""
        query = "SELECT * FROM c ORDER BY c.created_at DESC"
        results = await query_items(VOTERS_CONTAINER, query)
        return [VoterDocument(**r) for r in results]

    async def count(self, verified_only: bool = False) -> int:
        """Count voters, optionally only verified ones."""
        if verified_only:
            query = "SELECT VALUE COUNT(1) FROM c WHERE c.is_verified = true"
        else:
            query = "SELECT VALUE COUNT(1) FROM c"
        return await query_count(VOTERS_CONTAINER, query)

    # ========================================================================
    # Write Operations
    # ========================================================================

    async def get_or_create(self, key: str, voter: VoterDocument) -> tuple[VoterDocument, bool]:
        """
        Return the voter registered under ``key``, creating ``voter`` if none is.

        The voter document is written before the lookup is claimed, so a lookup
        entry always points at an existing voter. If a concurrent login wins the
        claim, our document is discarded and the winner is returned.

        Returns:
            (voter, created)
        """
        existing = await self.get_by_login(key)
        if existing:
            return existing, False

        await create_item(VOTERS_CONTAINER, voter.model_dump(mode="json"))
        if await identity_lookup.claim(key, voter.id):
            logger.info(f"Created voter {voter.id}")
            return voter, True

        await delete_item(VOTERS_CONTAINER, voter.id, partition_key=voter.id)
        winner = await self.get_by_login(key)
        if winner is None:
            raise RuntimeError(f"Login key {key} claimed but voter missing")
        return winner, False

    async def set_verified(self, voter_id: str, is_verified: bool) -> Optional[VoterDocument]:
        """Set a voter's verification flag."""
        data = await patch_item(
            VOTERS_CONTAINER,
            voter_id,
            partition_key=voter_id,
            operations=[{"op": "set", "path": "/is_verified", "value": is_verified}],
        )
        if data is None:
            return None
        return VoterDocument(**data)

    async def touch_last_vote(self, voter_id: str) -> None:
        """Record when the voter last had a vote admitted."""
        await patch_item(
            VOTERS_CONTAINER,
            voter_id,
            partition_key=voter_id,
            operations=[
                {"op": "set", "path": "/last_vote_at", "value": datetime.now(timezone.utc).isoformat()}
            ],
        )
