"""
Repository provider for dependency injection.

This module provides a unified interface for accessing repositories
using Cosmos DB as the primary data store. Services depend on the
protocols below, so tests can substitute in-memory implementations.

Usage:
    from repositories.provider import get_event_repository, ...

    # In FastAPI dependencies:
    async def some_endpoint(
        event_repo: EventRepositoryProtocol = Depends(get_event_repository),
    ):
        event = await event_repo.get_by_id(event_id)
"""

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from core.config import settings
from models.cosmos_documents import AdminDocument, EventDocument, VoteDocument, VoterDocument

logger = logging.getLogger(__name__)


# =============================================================================
# Repository Protocols (Interfaces)
# =============================================================================


@runtime_checkable
class EventRepositoryProtocol(Protocol):
    """Protocol defining event repository operations."""

    async def get_by_id(self, event_id: str) -> Optional[EventDocument]: ...
    async def get_by_slug(self, voting_slug: str) -> Optional[EventDocument]: ...
    async def list_by_owner(self, admin_id: str) -> list[EventDocument]: ...
    async def list_active(self) -> list[EventDocument]: ...
    async def create(self, event: EventDocument) -> EventDocument: ...
    async def apply_update(self, event_id: str, fields: dict[str, Any]) -> Optional[EventDocument]: ...
    async def increment_total_votes(self, event_id: str) -> Optional[int]: ...
    async def delete(self, event_id: str) -> bool: ...


@runtime_checkable
class VoteRepositoryProtocol(Protocol):
    """Protocol defining vote ledger operations."""

    async def get(self, event_id: str, voter_id: str) -> Optional[VoteDocument]: ...
    async def list_for_event(self, event_id: str) -> list[VoteDocument]: ...
    async def list_for_voter(self, voter_id: str) -> list[VoteDocument]: ...
    async def get_team_counts(self, event_id: str) -> dict[str, int]: ...
    async def list_recent_for_events(self, event_ids: list[str], limit: int = 10) -> list[VoteDocument]: ...
    async def count_all(self) -> int: ...
    async def create(self, vote: VoteDocument) -> Optional[VoteDocument]: ...
    async def delete_for_event(self, event_id: str) -> int: ...


@runtime_checkable
class VoterRepositoryProtocol(Protocol):
    """Protocol defining voter repository operations."""

    async def get_by_id(self, voter_id: str) -> Optional[VoterDocument]: ...
    async def get_by_login(self, key: str) -> Optional[VoterDocument]: ...
    async def list_all(self) -> list[VoterDocument]: ...
    async def count(self, verified_only: bool = False) -> int: ...
    async def get_or_create(self, key: str, voter: VoterDocument) -> tuple[VoterDocument, bool]: ...
    async def set_verified(self, voter_id: str, is_verified: bool) -> Optional[VoterDocument]: ...
    async def touch_last_vote(self, voter_id: str) -> None: ...


@runtime_checkable
class AdminRepositoryProtocol(Protocol):
    """Protocol defining admin repository operations."""

    async def get_by_id(self, admin_id: str) -> Optional[AdminDocument]: ...
    async def get_by_email(self, email: str) -> Optional[AdminDocument]: ...
    async def get_or_create(self, admin: AdminDocument) -> AdminDocument: ...
    async def save(self, admin: AdminDocument) -> AdminDocument: ...
    async def record_otp_failure(self, admin_id: str) -> int: ...
    async def clear_otp(self, admin_id: str) -> None: ...


# =============================================================================
# Repository Factory Functions
# =============================================================================


def _require_cosmos() -> None:
    if not settings.cosmos_configured:
        raise NotImplementedError(
            "No document store configured. Please set AZURE_COSMOS_ENDPOINT or AZURE_COSMOS_CONNECTION_STRING."
        )


async def get_event_repository() -> EventRepositoryProtocol:
    """Get the event repository."""
    _require_cosmos()
    from repositories.cosmos_event_repository import CosmosEventRepository

    return CosmosEventRepository()


async def get_vote_repository() -> VoteRepositoryProtocol:
    """Get the vote ledger repository."""
    _require_cosmos()
    from repositories.cosmos_vote_repository import CosmosVoteRepository

    return CosmosVoteRepository()


async def get_voter_repository() -> VoterRepositoryProtocol:
    """Get the voter repository."""
    _require_cosmos()
    from repositories.cosmos_voter_repository import CosmosVoterRepository

    return CosmosVoterRepository()


async def get_admin_repository() -> AdminRepositoryProtocol:
    """Get the admin repository."""
    _require_cosmos()
    from repositories.cosmos_admin_repository import CosmosAdminRepository

    return CosmosAdminRepository()
