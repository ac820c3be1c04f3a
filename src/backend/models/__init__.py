"""Cosmos DB document models."""

from models.cosmos_documents import (
    AdminDocument,
    EventDocument,
    IdentityLookupDocument,
    TeamDocument,
    VoteDocument,
    VoterDocument,
)

__all__ = [
    "EventDocument",
    "TeamDocument",
    "VoteDocument",
    "VoterDocument",
    "AdminDocument",
    "IdentityLookupDocument",
]
