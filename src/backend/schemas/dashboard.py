"""
Admin dashboard schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from schemas.event import Event


class DashboardStats(BaseModel):
    """Headline counts for the admin overview."""

    total_events: int = 0
    active_events: int = 0
    total_voters: int = 0
    verified_voters: int = 0
    total_votes: int = 0


class RecentVote(BaseModel):
    """A recent vote in one of the admin's events."""

    event_id: str
    event_name: Optional[str] = None
    voter_name: Optional[str] = None
    voter_email: Optional[str] = None
    team: str
    voted_at: datetime


class Dashboard(BaseModel):
    stats: DashboardStats
    recent_events: list[Event] = Field(default_factory=list)
    recent_votes: list[RecentVote] = Field(default_factory=list)
