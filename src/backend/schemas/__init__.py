"""Schemas module initialization."""

from schemas.auth import (
    AdminLoginRequest,
    AdminVerifyRequest,
    CodeSentResponse,
    MeResponse,
    TokenResponse,
    VoterLoginRequest,
)
from schemas.dashboard import Dashboard, DashboardStats, RecentVote
from schemas.event import (
    Event,
    EventCreate,
    EventDetail,
    EventResults,
    EventTally,
    EventUpdate,
    TeamInput,
    TeamTally,
    VoterEvent,
)
from schemas.vote import Vote, VoteCreate, VoteResponse, VoteStatus, VotingHistoryItem
from schemas.voter import AdminResponse, VoterResponse, VoterVerifyUpdate

__all__ = [
    "AdminLoginRequest",
    "AdminVerifyRequest",
    "CodeSentResponse",
    "MeResponse",
    "TokenResponse",
    "VoterLoginRequest",
    "Dashboard",
    "DashboardStats",
    "RecentVote",
    "Event",
    "EventCreate",
    "EventDetail",
    "EventResults",
    "EventTally",
    "EventUpdate",
    "TeamInput",
    "TeamTally",
    "VoterEvent",
    "Vote",
    "VoteCreate",
    "VoteResponse",
    "VoteStatus",
    "VotingHistoryItem",
    "AdminResponse",
    "VoterResponse",
    "VoterVerifyUpdate",
]
