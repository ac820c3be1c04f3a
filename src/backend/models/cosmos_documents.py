"""
Cosmos DB document models for TeamVote.

These Pydantic models define the document structure stored in Cosmos DB.
Documents are flat, with relationships embedded where the child has no
lifecycle of its own (teams inside events).

Container Strategy:
- events: Event definitions with embedded teams (partition: /id)
- votes: Individual votes (partition: /event_id, id: voter_id)
- voters: Voter profiles (partition: /id)
- admins: Admin profiles and pending login codes (partition: /id)
- identity-lookup: Secondary index login key -> owner id (partition: /id)
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Timezone-aware current time; all stored timestamps are UTC."""
    return datetime.now(timezone.utc)


DEFAULT_TEAM_COLOR = "#3B82F6"


# ============================================================================
# Base Document Model
# ============================================================================


class CosmosDocument(BaseModel):
    """
    Base class for Cosmos DB documents.

    All documents have:
    - id: Unique identifier (also used as partition key for most containers)
    - _ts: Timestamp (managed by Cosmos DB)
    - _etag: ETag for optimistic concurrency (managed by Cosmos DB)
    """

    # Allow extra fields for Cosmos DB system properties (_ts, _etag, etc.)
    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: str(uuid4()))


# ============================================================================
# Event Documents
# ============================================================================


class TeamDocument(BaseModel):
    """
    Embedded team within EventDocument.

    The id is generated once and survives renames; votes reference it.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    description: Optional[str] = None
    color: str = DEFAULT_TEAM_COLOR


class EventDocument(CosmosDocument):
    """
    Event document stored in the 'events' container.

    Partition key: /id
    Contains the schedule window, embedded teams and the denormalized vote counter.
    """

    name: str
    description: Optional[str] = None
    voting_slug: str
    teams: list[TeamDocument] = Field(default_factory=list)

    # Scheduling
    start_date: datetime
    end_date: datetime
    is_active: bool = True

    # Fast-path summary only; tallies always come from the votes container
    total_votes: int = 0

    created_by: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def is_open_at(self, now: datetime) -> bool:
        """Active flag set and ``now`` inside [start_date, end_date]."""
        return self.is_active and self.start_date <= now <= self.end_date

    @property
    def is_currently_open(self) -> bool:
        """Check the voting window against the current time."""
        return self.is_open_at(utcnow())

    def current_team_name(self, team_id: str, recorded_name: str) -> str:
        """Name a team has now, or the name recorded with a vote if it is gone."""
        for team in self.teams:
            if team.id == team_id:
                return team.name
        return recorded_name

    def find_team(self, team_name: str) -> Optional[TeamDocument]:
        """Exact, case-sensitive lookup by display name."""
        for team in self.teams:
            if team.name == team_name:
                return team
        return None


# ============================================================================
# Vote Documents
# ============================================================================


class VoteDocument(CosmosDocument):
    """
    Vote document stored in the 'votes' container.

    Partition key: /event_id
    The document id is the voter id. Cosmos DB guarantees id uniqueness within a
    logical partition, so a second insert for the same (event, voter) pair is
    rejected by the store itself.
    """

    event_id: str
    voter_id: str
    team_id: str
    team_name: str  # Display snapshot at vote time
    voted_at: datetime = Field(default_factory=utcnow)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


# ============================================================================
# Identity Documents
# ============================================================================


class VoterDocument(CosmosDocument):
    """
    Voter document stored in the 'voters' container.

    Partition key: /id
    """

    name: str
    email: Optional[str] = None
    is_verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    last_vote_at: Optional[datetime] = None


class AdminDocument(CosmosDocument):
    """
    Admin document stored in the 'admins' container.

    Partition key: /id
    Holds the hash of the pending one-time login code, never the code itself.
    """

    email: str
    name: str
    is_verified: bool = False
    otp_hash: Optional[str] = None
    otp_expires_at: Optional[datetime] = None
    otp_failed_attempts: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None


class IdentityLookupDocument(CosmosDocument):
    """
    Secondary index: login key -> owner id.

    Partition key: /id
    The id is the namespaced login key (e.g. ``voter-name:alice``), so creating
    it is an atomic claim on that key.
    """

    owner_id: str
