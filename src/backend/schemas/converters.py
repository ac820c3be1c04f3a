"""
Schema converter functions.

Centralized helper functions for converting Cosmos documents to Pydantic schemas.
These are the single source of truth for document-to-schema conversions, used by
admin, voter and public endpoints alike.
"""

from datetime import datetime
from typing import Optional

from models.cosmos_documents import (
    AdminDocument,
    EventDocument,
    VoteDocument,
    VoterDocument,
    utcnow,
)
from schemas.event import Event, PublicEventSummary, Team, VoterEvent
from schemas.vote import Vote, VotingHistoryItem
from schemas.voter import AdminResponse, VoterResponse


def event_document_to_schema(event: EventDocument, now: Optional[datetime] = None) -> Event:
    """
    Convert an EventDocument to an Event schema.

    ``is_currently_open`` is evaluated against ``now`` at conversion time.
    """
    now = now or utcnow()
    return Event(
        id=event.id,
        name=event.name,
        description=event.description,
        voting_slug=event.voting_slug,
        teams=[Team.model_validate(t, from_attributes=True) for t in event.teams],
        start_date=event.start_date,
        end_date=event.end_date,
        is_active=event.is_active,
        is_currently_open=event.is_open_at(now),
        total_votes=event.total_votes,
        created_by=event.created_by,
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


def event_document_to_voter_schema(event: EventDocument, has_voted: bool) -> VoterEvent:
    """Convert an EventDocument to the voter listing schema."""
    return VoterEvent(**event_document_to_schema(event).model_dump(), has_voted=has_voted)


def event_document_to_public_summary(event: EventDocument) -> PublicEventSummary:
    """Event fields exposed on the public results page."""
    return PublicEventSummary(
        id=event.id,
        name=event.name,
        description=event.description,
        start_date=event.start_date,
        end_date=event.end_date,
        is_currently_open=event.is_currently_open,
    )


def vote_document_to_schema(vote: VoteDocument) -> Vote:
    return Vote(
        event_id=vote.event_id,
        voter_id=vote.voter_id,
        team_id=vote.team_id,
        team_name=vote.team_name,
        voted_at=vote.voted_at,
    )


def history_item(vote: VoteDocument, event: EventDocument) -> VotingHistoryItem:
    """
    Build one voting-history row.

    The team is shown under its current name when it still exists in the
    event, falling back to the name recorded at vote time.
    """
    return VotingHistoryItem(
        event_id=event.id,
        event_name=event.name,
        event_description=event.description,
        team=event.current_team_name(vote.team_id, vote.team_name),
        voted_at=vote.voted_at,
        event_start_date=event.start_date,
        event_end_date=event.end_date,
    )


def voter_document_to_schema(voter: VoterDocument) -> VoterResponse:
    return VoterResponse.model_validate(voter, from_attributes=True)


def admin_document_to_schema(admin: AdminDocument) -> AdminResponse:
    return AdminResponse.model_validate(admin, from_attributes=True)
