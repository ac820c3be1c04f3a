"""
Domain error taxonomy.

Every error here is an expected, caller-recoverable condition. API routes
translate them into HTTP responses; nothing in the core retries them.
"""


class VotingError(Exception):
    """Base exception for voting platform operations."""

    pass


class NotFoundError(VotingError):
    """A referenced entity (event, voter, admin) does not exist."""

    pass


class EventNotFoundError(NotFoundError):
    """Event does not exist or is not visible to the caller."""

    pass


class EventNotOpenError(VotingError):
    """Event is missing, inactive, or outside its voting window."""

    pass


class InvalidTeamSelectionError(VotingError):
    """Team name is not among the event's current teams."""

    pass


class DuplicateVoteError(VotingError):
    """Voter already has a vote for this event."""

    def __init__(self, voted_for: str):
        self.voted_for = voted_for
        super().__init__(f"You already voted for {voted_for}")


class EventValidationError(VotingError):
    """Malformed event input (bad window, too few or duplicate teams)."""

    pass


class AuthenticationError(VotingError):
    """Login credentials or one-time code rejected."""

    pass


class StorageUnavailableError(VotingError):
    """Document store unreachable after retries."""

    pass
