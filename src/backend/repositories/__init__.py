"""Repository modules for database access."""

from repositories.cosmos_admin_repository import CosmosAdminRepository
from repositories.cosmos_event_repository import CosmosEventRepository
from repositories.cosmos_vote_repository import CosmosVoteRepository
from repositories.cosmos_voter_repository import CosmosVoterRepository

__all__ = [
    "CosmosEventRepository",
    "CosmosVoteRepository",
    "CosmosVoterRepository",
    "CosmosAdminRepository",
]
