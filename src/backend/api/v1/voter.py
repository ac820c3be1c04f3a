"""
Voter endpoints.

Open events, vote casting, vote status and voting history for the signed-in
voter. Results by event id are public.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import (
    get_admission_service,
    get_current_verified_voter,
    get_current_voter,
    get_event_service,
    get_tally_service,
    get_vote_metadata,
)
from core.errors import (
    DuplicateVoteError,
    EventNotFoundError,
    EventNotOpenError,
    InvalidTeamSelectionError,
)
from models.cosmos_documents import VoterDocument
from repositories.provider import VoteRepositoryProtocol, get_vote_repository
from schemas.converters import event_document_to_voter_schema, history_item, vote_document_to_schema
from schemas.event import EventTally, VoterEvent
from schemas.vote import VoteCreate, VoteResponse, VoteStatus, VotingHistoryItem
from services.admission_service import VoteAdmissionService, VoteMetadata
from services.event_service import EventService
from services.tally_service import TallyService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/events", response_model=list[VoterEvent])
async def list_open_events(
    voter: Annotated[VoterDocument, Depends(get_current_voter)],
    event_service: Annotated[EventService, Depends(get_event_service)],
) -> list[VoterEvent]:
    """Events open right now, each flagged with whether this voter has voted."""
    events = await event_service.list_open_events_for_voter(voter.id)
    return [event_document_to_voter_schema(event, has_voted) for event, has_voted in events]


@router.get("/events/{event_id}", response_model=VoterEvent)
async def get_open_event(
    event_id: str,
    voter: Annotated[VoterDocument, Depends(get_current_voter)],
    event_service: Annotated[EventService, Depends(get_event_service)],
    vote_repo: VoteRepositoryProtocol = Depends(get_vote_repository),
) -> VoterEvent:
    """Details of an open event."""
    try:
        event = await event_service.get_open_event(event_id)
    except EventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found or not active",
        )
    existing = await vote_repo.get(event_id, voter.id)
    return event_document_to_voter_schema(event, has_voted=existing is not None)


@router.post("/events/{event_id}/vote", response_model=VoteResponse)
async def cast_vote(
    event_id: str,
    vote_data: VoteCreate,
    voter: Annotated[VoterDocument, Depends(get_current_verified_voter)],
    admission_service: Annotated[VoteAdmissionService, Depends(get_admission_service)],
    metadata: Annotated[VoteMetadata, Depends(get_vote_metadata)],
) -> VoteResponse:
    """
    Cast a vote for a team, by its exact name.

    Each voter gets one vote per event. A repeat attempt answers 409 with the
    team already chosen; clients should treat that as "your vote counted".
    """
    try:
        vote = await admission_service.admit_vote(event_id, voter.id, vote_data.team, metadata)
    except EventNotOpenError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except InvalidTeamSelectionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except DuplicateVoteError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "voted_for": e.voted_for},
        )

    return VoteResponse(
        success=True,
        message="Vote cast successfully",
        vote=vote_document_to_schema(vote),
    )


@router.get("/events/{event_id}/vote-status", response_model=VoteStatus)
async def get_vote_status(
    event_id: str,
    voter: Annotated[VoterDocument, Depends(get_current_voter)],
    vote_repo: VoteRepositoryProtocol = Depends(get_vote_repository),
) -> VoteStatus:
    """Whether this voter has voted in an event, and for which team."""
    vote = await vote_repo.get(event_id, voter.id)
    return VoteStatus(
        event_id=event_id,
        has_voted=vote is not None,
        voted_for=vote.team_name if vote else None,
        voted_at=vote.voted_at if vote else None,
    )


@router.get("/events/{event_id}/results", response_model=EventTally)
async def get_results(
    event_id: str,
    tally_service: Annotated[TallyService, Depends(get_tally_service)],
) -> EventTally:
    """Per-team results for an event. No sign-in required."""
    try:
        return await tally_service.compute_stats(event_id)
    except EventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )


@router.get("/history", response_model=list[VotingHistoryItem])
async def get_history(
    voter: Annotated[VoterDocument, Depends(get_current_voter)],
    event_service: Annotated[EventService, Depends(get_event_service)],
) -> list[VotingHistoryItem]:
    """This voter's votes, newest first."""
    history = await event_service.voting_history(voter.id)
    return [history_item(vote, event) for vote, event in history]
