"""
Admin dashboard aggregation.
"""

from models.cosmos_documents import utcnow
from repositories.provider import (
    EventRepositoryProtocol,
    VoteRepositoryProtocol,
    VoterRepositoryProtocol,
)
from schemas.converters import event_document_to_schema
from schemas.dashboard import Dashboard, DashboardStats, RecentVote

RECENT_EVENTS_LIMIT = 5
RECENT_VOTES_LIMIT = 10


class DashboardService:
    def __init__(
        self,
        event_repo: EventRepositoryProtocol,
        vote_repo: VoteRepositoryProtocol,
        voter_repo: VoterRepositoryProtocol,
    ):
        self.event_repo = event_repo
        self.vote_repo = vote_repo
        self.voter_repo = voter_repo

    async def get_dashboard(self, admin_id: str) -> Dashboard:
        """Counts plus the admin's latest events and the latest votes in them."""
        now = utcnow()
        events = await self.event_repo.list_by_owner(admin_id)
        events_by_id = {e.id: e for e in events}

        stats = DashboardStats(
            total_events=len(events),
            active_events=sum(1 for e in events if e.is_open_at(now)),
            total_voters=await self.voter_repo.count(),
            verified_voters=await self.voter_repo.count(verified_only=True),
            total_votes=await self.vote_repo.count_all(),
        )

        recent_votes = []
        for vote in await self.vote_repo.list_recent_for_events(list(events_by_id), limit=RECENT_VOTES_LIMIT):
            event = events_by_id.get(vote.event_id)
            voter = await self.voter_repo.get_by_id(vote.voter_id)
            recent_votes.append(
                RecentVote(
                    event_id=vote.event_id,
                    event_name=event.name if event else None,
                    voter_name=voter.name if voter else None,
                    voter_email=voter.email if voter else None,
                    team=vote.team_name,
                    voted_at=vote.voted_at,
                )
            )

        return Dashboard(
            stats=stats,
            recent_events=[event_document_to_schema(e, now) for e in events[:RECENT_EVENTS_LIMIT]],
            recent_votes=recent_votes,
        )
