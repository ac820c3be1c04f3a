"""
Event Service

CRUD over events plus the voting-window predicate. Every admin operation takes
the acting admin's id explicitly; events owned by someone else are reported as
not found.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

import structlog

from core.errors import EventNotFoundError, EventValidationError
from core.security import generate_voting_slug
from models.cosmos_documents import EventDocument, TeamDocument, VoteDocument, utcnow
from repositories.provider import EventRepositoryProtocol, VoteRepositoryProtocol
from schemas.event import EventCreate, EventUpdate, TeamInput
from services.notifier import ChangeNotifier, EventChanged

logger = structlog.get_logger(__name__)

MIN_TEAMS = 2


def is_open(event: EventDocument, now: datetime) -> bool:
    """Active flag set and ``now`` within [start_date, end_date]."""
    return event.is_open_at(now)


def validate_window(start_date: datetime, end_date: datetime) -> None:
    if end_date <= start_date:
        raise EventValidationError("End date must be after start date")


def validate_team_names(teams: list[TeamInput]) -> None:
    if len(teams) < MIN_TEAMS:
        raise EventValidationError(f"At least {MIN_TEAMS} teams are required")
    seen: set[str] = set()
    for team in teams:
        name = team.name.strip()
        if not name:
            raise EventValidationError("Team names must not be empty")
        if name in seen:
            raise EventValidationError(f"Duplicate team name: {name}")
        seen.add(name)


class EventService:
    """
    Service for event management.

    Features:
    - Owner-scoped create, read, update and delete for admins
    - Cascade delete of an event's votes
    - Open-event lookups for voters and the public, evaluated on every read
    """

    def __init__(
        self,
        event_repo: EventRepositoryProtocol,
        vote_repo: VoteRepositoryProtocol,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self.event_repo = event_repo
        self.vote_repo = vote_repo
        self.notifier = notifier

    # ========================================================================
    # Admin operations
    # ========================================================================

    async def create_event(self, admin_id: str, data: EventCreate) -> EventDocument:
        """
        Create an event with freshly assigned team ids and a random voting slug.

        Raises:
            EventValidationError: bad window, too few teams, or duplicate names
        """
        validate_window(data.start_date, data.end_date)
        validate_team_names(data.teams)

        event = EventDocument(
            name=data.name,
            description=data.description,
            voting_slug=generate_voting_slug(),
            teams=[
                TeamDocument(name=t.name.strip(), description=t.description, color=t.color) for t in data.teams
            ],
            start_date=data.start_date,
            end_date=data.end_date,
            created_by=admin_id,
        )
        await self.event_repo.create(event)
        logger.info("event_created", event_id=event.id, admin_id=admin_id, teams=len(event.teams))
        return event

    async def get_event(self, admin_id: str, event_id: str) -> EventDocument:
        event = await self.event_repo.get_by_id(event_id)
        if event is None or event.created_by != admin_id:
            raise EventNotFoundError(f"Event {event_id} not found")
        return event

    async def list_events(self, admin_id: str) -> list[EventDocument]:
        return await self.event_repo.list_by_owner(admin_id)

    async def update_event(self, admin_id: str, event_id: str, data: EventUpdate) -> EventDocument:
        """
        Apply a partial update.

        The merged window is re-validated. Submitted teams that carry a known id
        keep it, so renaming a team leaves its votes attached; teams without a
        known id are new. A team that already has votes cannot be removed.

        Raises:
            EventNotFoundError: event missing or owned by another admin
            EventValidationError: merged event would be invalid
        """
        event = await self.get_event(admin_id, event_id)

        fields: dict[str, Any] = data.model_dump(exclude_unset=True)
        for key in ("name", "teams", "start_date", "end_date", "is_active"):
            if key in fields and fields[key] is None:
                del fields[key]

        validate_window(fields.get("start_date", event.start_date), fields.get("end_date", event.end_date))

        if "teams" in fields:
            fields["teams"] = await self._merge_teams(event, data.teams or [])

        if not fields:
            return event

        updated = await self.event_repo.apply_update(event_id, fields)
        if updated is None:
            raise EventNotFoundError(f"Event {event_id} not found")

        logger.info("event_updated", event_id=event_id, admin_id=admin_id, fields=sorted(fields))
        self._notify(EventChanged(type="event_updated", event_id=event_id))
        return updated

    async def set_active(self, admin_id: str, event_id: str, is_active: bool) -> EventDocument:
        await self.get_event(admin_id, event_id)
        updated = await self.event_repo.apply_update(event_id, {"is_active": is_active})
        if updated is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        logger.info("event_active_changed", event_id=event_id, is_active=is_active)
        self._notify(EventChanged(type="event_updated", event_id=event_id))
        return updated

    async def delete_event(self, admin_id: str, event_id: str) -> int:
        """
        Delete an event and every vote cast in it. Irreversible.

        The event document goes first, so no new vote can be admitted while
        the ledger is being purged.

        Returns:
            Number of votes deleted
        """
        await self.get_event(admin_id, event_id)
        if not await self.event_repo.delete(event_id):
            raise EventNotFoundError(f"Event {event_id} not found")

        deleted_votes = await self.vote_repo.delete_for_event(event_id)
        logger.info("event_deleted", event_id=event_id, admin_id=admin_id, deleted_votes=deleted_votes)
        self._notify(EventChanged(type="event_deleted", event_id=event_id))
        return deleted_votes

    # ========================================================================
    # Public and voter operations
    # ========================================================================

    async def get_event_by_slug(self, voting_slug: str) -> EventDocument:
        """Any event by slug, open or not (public results)."""
        event = await self.event_repo.get_by_slug(voting_slug)
        if event is None:
            raise EventNotFoundError("Event not found")
        return event

    async def get_open_event_by_slug(self, voting_slug: str, now: Optional[datetime] = None) -> EventDocument:
        """The event behind a slug, only while it is open."""
        event = await self.event_repo.get_by_slug(voting_slug)
        if event is None or not is_open(event, now or utcnow()):
            raise EventNotFoundError("Event not found or not active")
        return event

    async def get_open_event(self, event_id: str, now: Optional[datetime] = None) -> EventDocument:
        event = await self.event_repo.get_by_id(event_id)
        if event is None or not is_open(event, now or utcnow()):
            raise EventNotFoundError("Event not found or not active")
        return event

    async def list_open_events(self, now: Optional[datetime] = None) -> list[EventDocument]:
        """Open events, closing soonest first."""
        now = now or utcnow()
        events = [e for e in await self.event_repo.list_active() if is_open(e, now)]
        return sorted(events, key=lambda e: e.end_date)

    async def list_open_events_for_voter(
        self, voter_id: str, now: Optional[datetime] = None
    ) -> list[tuple[EventDocument, bool]]:
        """Open events paired with whether the voter has voted in each."""
        events = await self.list_open_events(now)
        voted = {v.event_id for v in await self.vote_repo.list_for_voter(voter_id)}
        return [(event, event.id in voted) for event in events]

    async def voting_history(self, voter_id: str) -> list[tuple[VoteDocument, EventDocument]]:
        """A voter's votes, newest first, each with its event. Votes of deleted events are skipped."""
        history = []
        events: dict[str, Optional[EventDocument]] = {}
        for vote in await self.vote_repo.list_for_voter(voter_id):
            if vote.event_id not in events:
                events[vote.event_id] = await self.event_repo.get_by_id(vote.event_id)
            event = events[vote.event_id]
            if event is not None:
                history.append((vote, event))
        return history

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _merge_teams(self, event: EventDocument, submitted: list[TeamInput]) -> list[TeamDocument]:
        validate_team_names(submitted)

        existing = {t.id: t for t in event.teams}
        merged: list[TeamDocument] = []
        seen_ids: set[str] = set()
        for team in submitted:
            if team.id is not None and team.id in existing:
                if team.id in seen_ids:
                    raise EventValidationError("Duplicate team id")
                seen_ids.add(team.id)
            team_id = team.id if team.id in existing else str(uuid4())
            merged.append(
                TeamDocument(id=team_id, name=team.name.strip(), description=team.description, color=team.color)
            )

        removed = set(existing) - {t.id for t in merged}
        if removed:
            counts = await self.vote_repo.get_team_counts(event.id)
            voted = [existing[team_id].name for team_id in removed if counts.get(team_id, 0) > 0]
            if voted:
                raise EventValidationError(f"Cannot remove teams that already have votes: {', '.join(sorted(voted))}")
        return merged

    def _notify(self, message: EventChanged) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.publish(message.event_id, message)
        except Exception as e:
            logger.warning("event_notify_failed", event_id=message.event_id, error=str(e))
