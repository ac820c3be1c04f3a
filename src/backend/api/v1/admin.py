"""
Admin Event Management Endpoints.

Provides full CRUD operations for events owned by the signed-in admin, plus
the dashboard and voter management.

Security measures:
- All endpoints require a valid admin JWT
- Events of other admins are reported as not found
- Deleting an event requires explicit confirmation and is audit logged
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.deps import (
    get_auth_service,
    get_current_admin,
    get_dashboard_service,
    get_event_service,
    get_tally_service,
)
from core.errors import EventNotFoundError, EventValidationError, NotFoundError
from models.cosmos_documents import AdminDocument
from repositories.provider import VoterRepositoryProtocol, get_voter_repository
from schemas.converters import event_document_to_schema, voter_document_to_schema
from schemas.dashboard import Dashboard
from schemas.event import (
    Event,
    EventActiveUpdate,
    EventCreate,
    EventDeleteResponse,
    EventDetail,
    EventUpdate,
)
from schemas.voter import VoterResponse, VoterVerifyUpdate
from services.auth_service import AuthService
from services.dashboard_service import DashboardService
from services.event_service import EventService
from services.tally_service import TallyService

logger = structlog.get_logger(__name__)

router = APIRouter()


# ============================================================================
# Event CRUD
# ============================================================================


@router.post("/events", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event(
    data: EventCreate,
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    event_service: Annotated[EventService, Depends(get_event_service)],
) -> Event:
    """
    Create a new voting event.

    A random public voting slug is generated for the event.
    """
    try:
        event = await event_service.create_event(admin.id, data)
    except EventValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return event_document_to_schema(event)


@router.get("/events", response_model=list[Event])
async def list_events(
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    event_service: Annotated[EventService, Depends(get_event_service)],
) -> list[Event]:
    """List the admin's events, newest first."""
    events = await event_service.list_events(admin.id)
    return [event_document_to_schema(e) for e in events]


@router.get("/events/{event_id}", response_model=EventDetail)
async def get_event(
    event_id: str,
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    event_service: Annotated[EventService, Depends(get_event_service)],
    tally_service: Annotated[TallyService, Depends(get_tally_service)],
) -> EventDetail:
    """
    Get an event with its tally and the list of who voted for what.
    """
    try:
        event = await event_service.get_event(admin.id, event_id)
    except EventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )

    return EventDetail(
        event=event_document_to_schema(event),
        tally=await tally_service.tally_for(event),
        voter_list=await tally_service.voter_breakdown(event),
    )


@router.put("/events/{event_id}", response_model=Event)
async def update_event(
    event_id: str,
    data: EventUpdate,
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    event_service: Annotated[EventService, Depends(get_event_service)],
) -> Event:
    """
    Update an event's details, schedule, teams or active flag.

    Teams sent with their existing id keep their votes when renamed.
    Admitted votes are never modified.
    """
    try:
        event = await event_service.update_event(admin.id, event_id, data)
    except EventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    except EventValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return event_document_to_schema(event)


@router.patch("/events/{event_id}/active", response_model=Event)
async def set_event_active(
    event_id: str,
    data: EventActiveUpdate,
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    event_service: Annotated[EventService, Depends(get_event_service)],
) -> Event:
    """Switch voting for an event on or off."""
    try:
        event = await event_service.set_active(admin.id, event_id, data.is_active)
    except EventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    return event_document_to_schema(event)


@router.delete("/events/{event_id}", response_model=EventDeleteResponse)
async def delete_event(
    event_id: str,
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    event_service: Annotated[EventService, Depends(get_event_service)],
    confirm: bool = Query(False, description="Must be true; deletes the event and all of its votes"),
) -> EventDeleteResponse:
    """
    Delete an event and every vote cast in it.

    This cannot be undone, so the request must carry confirm=true.
    """
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deleting an event removes all of its votes. Repeat with confirm=true.",
        )

    logger.warning("admin_event_delete", admin_id=admin.id, event_id=event_id)
    try:
        deleted_votes = await event_service.delete_event(admin.id, event_id)
    except EventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )

    return EventDeleteResponse(
        message="Event deleted",
        event_id=event_id,
        deleted_votes=deleted_votes,
    )


# ============================================================================
# Dashboard and voters
# ============================================================================


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    dashboard_service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> Dashboard:
    """Overview counts with the latest events and votes."""
    return await dashboard_service.get_dashboard(admin.id)


@router.get("/voters", response_model=list[VoterResponse])
async def list_voters(
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    voter_repo: VoterRepositoryProtocol = Depends(get_voter_repository),
) -> list[VoterResponse]:
    """List all voters, newest first."""
    voters = await voter_repo.list_all()
    return [voter_document_to_schema(v) for v in voters]


@router.patch("/voters/{voter_id}/verify", response_model=VoterResponse)
async def verify_voter(
    voter_id: str,
    data: VoterVerifyUpdate,
    admin: Annotated[AdminDocument, Depends(get_current_admin)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> VoterResponse:
    """Verify a voter, or revoke their verification."""
    try:
        voter = await auth_service.set_voter_verified(voter_id, data.is_verified)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Voter not found",
        )

    logger.info("admin_voter_verification", admin_id=admin.id, voter_id=voter_id, is_verified=data.is_verified)
    return voter_document_to_schema(voter)
