"""
Vote-related Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    team: str = Field(..., min_length=1, max_length=100, description="Exact team name")


class Vote(BaseModel):
    """An admitted vote."""

    event_id: str
    voter_id: str
    team_id: str
    team_name: str
    voted_at: datetime

    model_config = {"from_attributes": True}


class VoteResponse(BaseModel):
    """Response after successfully casting a vote."""

    success: bool
    message: str
    vote: Optional[Vote] = None


class VoteStatus(BaseModel):
    """Whether the current voter has voted in an event, and for whom."""

    event_id: str
    has_voted: bool
    voted_for: Optional[str] = None
    voted_at: Optional[datetime] = None


class VotingHistoryItem(BaseModel):
    """One past vote with the event window it belonged to."""

    event_id: str
    event_name: str
    event_description: Optional[str] = None
    team: str
    voted_at: datetime
    event_start_date: datetime
    event_end_date: datetime
