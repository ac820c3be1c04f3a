"""
Event-related Pydantic schemas.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.cosmos_documents import DEFAULT_TEAM_COLOR

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from clients are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TeamInput(BaseModel):
    """A team as submitted by an admin. ``id`` is only sent when editing an existing team."""

    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: str = Field(DEFAULT_TEAM_COLOR, pattern=HEX_COLOR_PATTERN)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class Team(BaseModel):
    """A team within an event."""

    id: str
    name: str
    description: Optional[str] = None
    color: str = DEFAULT_TEAM_COLOR

    model_config = {"from_attributes": True}


class EventCreate(BaseModel):
    """Schema for creating a new event."""

    name: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    teams: list[TeamInput] = Field(..., min_length=2, max_length=50)
    start_date: datetime
    end_date: datetime

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return _as_utc(v)


class EventUpdate(BaseModel):
    """Partial update of an event. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    teams: Optional[list[TeamInput]] = Field(None, min_length=2, max_length=50)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v) if v is not None else v


class EventActiveUpdate(BaseModel):
    """Toggle an event's active flag."""

    is_active: bool


class Event(BaseModel):
    """Schema for event responses."""

    id: str
    name: str
    description: Optional[str] = None
    voting_slug: str
    teams: list[Team]
    start_date: datetime
    end_date: datetime
    is_active: bool
    is_currently_open: bool = False
    total_votes: int = 0
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VoterEvent(Event):
    """Open event as listed for a signed-in voter."""

    has_voted: bool = False


class PublicEventSummary(BaseModel):
    """Event fields safe to show on the public results page."""

    id: str
    name: str
    description: Optional[str] = None
    start_date: datetime
    end_date: datetime
    is_currently_open: bool


class TeamTally(BaseModel):
    """Vote count for one team."""

    team_id: str
    name: str
    votes: int = 0
    percentage: float = 0.0
    color: str = DEFAULT_TEAM_COLOR


class EventTally(BaseModel):
    """Per-team breakdown computed from the vote ledger."""

    event_id: str
    total_votes: int = 0
    teams: list[TeamTally] = Field(default_factory=list)


class EventResults(BaseModel):
    """Public results: event summary plus tally."""

    event: PublicEventSummary
    tally: EventTally


class VoterListEntry(BaseModel):
    """One admitted vote as shown to the event's admin."""

    voter_id: str
    voter_name: Optional[str] = None
    voter_email: Optional[str] = None
    team_id: str
    team: str
    voted_at: datetime


class EventDetail(BaseModel):
    """Admin view of an event: the event, its tally and who voted."""

    event: Event
    tally: EventTally
    voter_list: list[VoterListEntry] = Field(default_factory=list)


class EventDeleteResponse(BaseModel):
    """Confirmation of a cascade delete."""

    message: str
    event_id: str
    deleted_votes: int = 0
