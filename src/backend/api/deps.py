"""
Shared dependencies for API endpoints.

Includes:
- Role-scoped JWT authentication for admins and voters
- Service factories wired to the Cosmos repositories
- Request metadata recorded with each vote
"""

from dataclasses import dataclass
from typing import Annotated, Union

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import settings
from core.security import ROLE_ADMIN, ROLE_VOTER, decode_token
from models.cosmos_documents import AdminDocument, VoterDocument
from repositories.provider import (
    AdminRepositoryProtocol,
    EventRepositoryProtocol,
    VoteRepositoryProtocol,
    VoterRepositoryProtocol,
    get_admin_repository,
    get_event_repository,
    get_vote_repository,
    get_voter_repository,
)
from services.admission_service import VoteAdmissionService, VoteMetadata
from services.auth_service import AuthService
from services.dashboard_service import DashboardService
from services.event_service import EventService
from services.notifier import ChangeNotifier, get_notifier
from services.tally_service import TallyService

logger = structlog.get_logger(__name__)

# Security schemes
security = HTTPBearer()


@dataclass
class Principal:
    """The authenticated caller."""

    role: str
    user: Union[AdminDocument, VoterDocument]

    @property
    def id(self) -> str:
        return self.user.id


# =============================================================================
# Authentication (JWT-based)
# =============================================================================


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    admin_repo: AdminRepositoryProtocol = Depends(get_admin_repository),
    voter_repo: VoterRepositoryProtocol = Depends(get_voter_repository),
) -> Principal:
    """
    Extract and validate the caller from the JWT token.

    Raises:
        HTTPException: If token is invalid or the account no longer exists.
    """
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    subject = payload.get("sub")
    role = payload.get("role")
    if subject is None or role not in (ROLE_ADMIN, ROLE_VOTER):
        raise _unauthorized("Invalid token payload")

    if role == ROLE_ADMIN:
        user = await admin_repo.get_by_id(subject)
    else:
        user = await voter_repo.get_by_id(subject)

    if user is None:
        raise _unauthorized("User not found")

    return Principal(role=role, user=user)


async def get_current_admin(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> AdminDocument:
    """
    Ensure the caller is an admin.

    Raises:
        HTTPException: If the caller is a voter.
    """
    if principal.role != ROLE_ADMIN:
        logger.warning("non_admin_access_attempt", user_id=principal.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return principal.user


async def get_current_voter(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> VoterDocument:
    """Ensure the caller is a voter."""
    if principal.role != ROLE_VOTER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Voter access required",
        )
    return principal.user


async def get_current_verified_voter(
    voter: Annotated[VoterDocument, Depends(get_current_voter)],
) -> VoterDocument:
    """
    Ensure the voter may cast votes.

    When voters are identified by email, an admin must verify them first.
    Name-mode voters are verified on creation.
    """
    if settings.VOTER_IDENTITY_MODE == "email" and not voter.is_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is awaiting verification by an administrator",
        )
    return voter


# =============================================================================
# Services
# =============================================================================


async def get_event_service(
    event_repo: EventRepositoryProtocol = Depends(get_event_repository),
    vote_repo: VoteRepositoryProtocol = Depends(get_vote_repository),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> EventService:
    return EventService(event_repo, vote_repo, notifier)


async def get_admission_service(
    event_repo: EventRepositoryProtocol = Depends(get_event_repository),
    vote_repo: VoteRepositoryProtocol = Depends(get_vote_repository),
    voter_repo: VoterRepositoryProtocol = Depends(get_voter_repository),
    notifier: ChangeNotifier = Depends(get_notifier),
) -> VoteAdmissionService:
    return VoteAdmissionService(event_repo, vote_repo, notifier=notifier, voter_repo=voter_repo)


async def get_tally_service(
    event_repo: EventRepositoryProtocol = Depends(get_event_repository),
    vote_repo: VoteRepositoryProtocol = Depends(get_vote_repository),
    voter_repo: VoterRepositoryProtocol = Depends(get_voter_repository),
) -> TallyService:
    return TallyService(event_repo, vote_repo, voter_repo)


async def get_auth_service(
    voter_repo: VoterRepositoryProtocol = Depends(get_voter_repository),
    admin_repo: AdminRepositoryProtocol = Depends(get_admin_repository),
) -> AuthService:
    return AuthService(voter_repo, admin_repo)


async def get_dashboard_service(
    event_repo: EventRepositoryProtocol = Depends(get_event_repository),
    vote_repo: VoteRepositoryProtocol = Depends(get_vote_repository),
    voter_repo: VoterRepositoryProtocol = Depends(get_voter_repository),
) -> DashboardService:
    return DashboardService(event_repo, vote_repo, voter_repo)


# =============================================================================
# Request metadata
# =============================================================================


def get_vote_metadata(request: Request) -> VoteMetadata:
    """Client address and user agent for the vote record."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Get first IP in chain (client IP)
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else None

    return VoteMetadata(ip_address=ip, user_agent=request.headers.get("User-Agent"))
