"""
Tally Service

Per-team counts and percentages, recomputed from the vote ledger on every
call. The event's total_votes counter is never used here.
"""

from collections import Counter
from typing import Optional

from core.errors import EventNotFoundError
from models.cosmos_documents import EventDocument, VoteDocument
from repositories.provider import (
    EventRepositoryProtocol,
    VoteRepositoryProtocol,
    VoterRepositoryProtocol,
)
from schemas.event import EventTally, TeamTally, VoterListEntry


def percentage(votes: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(votes / total * 100, 2)


def build_tally(event: EventDocument, votes: list[VoteDocument]) -> EventTally:
    """
    One row per current team, in team order, zero-vote teams included.

    Only votes for current teams are counted, so the rows always sum to the
    total. A vote can reference a removed team if it was admitted while the
    team was being removed.
    """
    team_ids = {team.id for team in event.teams}
    counts = Counter(vote.team_id for vote in votes if vote.team_id in team_ids)
    total = sum(counts.values())
    return EventTally(
        event_id=event.id,
        total_votes=total,
        teams=[
            TeamTally(
                team_id=team.id,
                name=team.name,
                votes=counts.get(team.id, 0),
                percentage=percentage(counts.get(team.id, 0), total),
                color=team.color,
            )
            for team in event.teams
        ],
    )


class TallyService:
    """Read-time aggregation over the vote ledger."""

    def __init__(
        self,
        event_repo: EventRepositoryProtocol,
        vote_repo: VoteRepositoryProtocol,
        voter_repo: Optional[VoterRepositoryProtocol] = None,
    ):
        self.event_repo = event_repo
        self.vote_repo = vote_repo
        self.voter_repo = voter_repo

    async def compute_stats(self, event_id: str) -> EventTally:
        """
        Count the votes of an event per team.

        Raises:
            EventNotFoundError: event does not exist
        """
        event = await self.event_repo.get_by_id(event_id)
        if event is None:
            raise EventNotFoundError(f"Event {event_id} not found")
        return await self.tally_for(event)

    async def compute_stats_by_slug(self, voting_slug: str) -> tuple[EventDocument, EventTally]:
        event = await self.event_repo.get_by_slug(voting_slug)
        if event is None:
            raise EventNotFoundError("Event not found")
        return event, await self.tally_for(event)

    async def tally_for(self, event: EventDocument) -> EventTally:
        votes = await self.vote_repo.list_for_event(event.id)
        return build_tally(event, votes)

    async def voter_breakdown(self, event: EventDocument) -> list[VoterListEntry]:
        """Who voted for what in an event, newest first (admin view)."""
        votes = await self.vote_repo.list_for_event(event.id)
        team_names = {team.id: team.name for team in event.teams}

        entries = []
        for vote in sorted(votes, key=lambda v: v.voted_at, reverse=True):
            voter = await self.voter_repo.get_by_id(vote.voter_id) if self.voter_repo else None
            entries.append(
                VoterListEntry(
                    voter_id=vote.voter_id,
                    voter_name=voter.name if voter else None,
                    voter_email=voter.email if voter else None,
                    team_id=vote.team_id,
                    team=team_names.get(vote.team_id, vote.team_name),
                    voted_at=vote.voted_at,
                )
            )
        return entries
