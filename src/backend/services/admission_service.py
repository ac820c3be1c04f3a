"""
Vote Admission Service

Turns a voter's team choice into a durable, exclusive vote.

Exclusivity is enforced by the votes container itself: a vote's document id is
the voter id and its partition key is the event id, so a second insert for the
same pair is rejected by Cosmos DB. The read-before-write check below only
produces a friendlier error earlier; it is not what keeps votes unique.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from core.errors import DuplicateVoteError, EventNotOpenError, InvalidTeamSelectionError
from models.cosmos_documents import VoteDocument, utcnow
from repositories.provider import (
    EventRepositoryProtocol,
    VoteRepositoryProtocol,
    VoterRepositoryProtocol,
)
from services.notifier import ChangeNotifier, VoteCast

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class VoteMetadata:
    """Where a vote attempt came from."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class VoteAdmissionService:
    """Validates and admits vote attempts."""

    def __init__(
        self,
        event_repo: EventRepositoryProtocol,
        vote_repo: VoteRepositoryProtocol,
        notifier: Optional[ChangeNotifier] = None,
        voter_repo: Optional[VoterRepositoryProtocol] = None,
    ):
        self.event_repo = event_repo
        self.vote_repo = vote_repo
        self.notifier = notifier
        self.voter_repo = voter_repo

    async def admit_vote(
        self,
        event_id: str,
        voter_id: str,
        team_name: str,
        metadata: Optional[VoteMetadata] = None,
        now: Optional[datetime] = None,
    ) -> VoteDocument:
        """
        Admit one vote for (event, voter).

        Checks, in order: the event is open, the team exists, the voter has not
        voted. A caller whose earlier attempt timed out may see
        DuplicateVoteError naming its own choice; that means the vote counted.

        Raises:
            EventNotOpenError: event missing, inactive or outside its window
            InvalidTeamSelectionError: no team with exactly this name
            DuplicateVoteError: voter already voted; carries the earlier choice
        """
        metadata = metadata or VoteMetadata()
        now = now or utcnow()

        event = await self.event_repo.get_by_id(event_id)
        if event is None or not event.is_open_at(now):
            raise EventNotOpenError("Event not found or not active")

        team = event.find_team(team_name)
        if team is None:
            raise InvalidTeamSelectionError("Invalid team selection")

        existing = await self.vote_repo.get(event_id, voter_id)
        if existing is not None:
            raise DuplicateVoteError(voted_for=event.current_team_name(existing.team_id, existing.team_name))

        vote = VoteDocument(
            id=voter_id,
            event_id=event_id,
            voter_id=voter_id,
            team_id=team.id,
            team_name=team.name,
            voted_at=now,
            ip_address=metadata.ip_address,
            user_agent=metadata.user_agent,
        )
        created = await self.vote_repo.create(vote)
        if created is None:
            winner = await self.vote_repo.get(event_id, voter_id)
            logger.info("vote_rejected_concurrent_duplicate", event_id=event_id, voter_id=voter_id)
            raise DuplicateVoteError(
                voted_for=event.current_team_name(winner.team_id, winner.team_name) if winner else team.name
            )

        logger.info("vote_admitted", event_id=event_id, voter_id=voter_id, team_id=team.id)

        total_votes = await self._increment_counter(event_id, fallback=event.total_votes + 1)
        await self._touch_voter(voter_id)
        self._notify(VoteCast(event_id=event_id, team_name=team.name, total_votes=total_votes))
        return created

    async def _increment_counter(self, event_id: str, fallback: int) -> int:
        # The ledger is authoritative; a failed counter update only leaves the summary stale.
        try:
            total = await self.event_repo.increment_total_votes(event_id)
        except Exception as e:
            logger.warning("vote_counter_increment_failed", event_id=event_id, error=str(e))
            return fallback
        return total if total is not None else fallback

    async def _touch_voter(self, voter_id: str) -> None:
        if self.voter_repo is None:
            return
        try:
            await self.voter_repo.touch_last_vote(voter_id)
        except Exception as e:
            logger.warning("voter_last_vote_update_failed", voter_id=voter_id, error=str(e))

    def _notify(self, message: VoteCast) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.publish(message.event_id, message)
        except Exception as e:
            logger.warning("vote_notify_failed", event_id=message.event_id, error=str(e))
