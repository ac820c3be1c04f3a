"""
Public event endpoints.

No authentication. Events are reached through their unguessable voting slug;
the internal id is only exposed for events that are currently open.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import get_event_service, get_tally_service
from core.errors import EventNotFoundError
from schemas.converters import event_document_to_public_summary, event_document_to_schema
from schemas.event import Event, EventResults
from services.event_service import EventService
from services.tally_service import TallyService

router = APIRouter()


@router.get("/public", response_model=list[Event])
async def list_public_events(
    event_service: Annotated[EventService, Depends(get_event_service)],
) -> list[Event]:
    """List events open for voting right now, closing soonest first."""
    events = await event_service.list_open_events()
    return [event_document_to_schema(e) for e in events]


@router.get("/public/{voting_slug}", response_model=Event)
async def get_public_event(
    voting_slug: str,
    event_service: Annotated[EventService, Depends(get_event_service)],
) -> Event:
    """
    Look up an event by its voting slug.

    Closed, inactive and unknown events all read as not found.
    """
    try:
        event = await event_service.get_open_event_by_slug(voting_slug)
    except EventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found or not active",
        )
    return event_document_to_schema(event)


@router.get("/public/{voting_slug}/results", response_model=EventResults)
async def get_public_results(
    voting_slug: str,
    tally_service: Annotated[TallyService, Depends(get_tally_service)],
) -> EventResults:
    """Results for an event by slug, whether or not voting is still open."""
    try:
        event, tally = await tally_service.compute_stats_by_slug(voting_slug)
    except EventNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    return EventResults(event=event_document_to_public_summary(event), tally=tally)
