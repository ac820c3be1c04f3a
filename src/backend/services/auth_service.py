"""
Authentication Service

Voter sign-in (find-or-create, keyed by display name or by email depending on
VOTER_IDENTITY_MODE) and admin sign-in with an emailed one-time code.

There is no mail transport: the admin's code is written to the application
log, and only its hash is stored.
"""

from datetime import timedelta
from typing import Optional

import structlog

from core.config import settings
from core.errors import AuthenticationError, NotFoundError
from core.security import (
    ROLE_ADMIN,
    ROLE_VOTER,
    create_access_token,
    generate_otp,
    hash_otp,
    verify_otp,
)
from models.cosmos_documents import AdminDocument, VoterDocument, utcnow
from repositories.identity_lookup import login_key
from repositories.provider import AdminRepositoryProtocol, VoterRepositoryProtocol

logger = structlog.get_logger(__name__)


class AuthService:
    """Issues access tokens to voters and admins."""

    def __init__(
        self,
        voter_repo: VoterRepositoryProtocol,
        admin_repo: AdminRepositoryProtocol,
        identity_mode: Optional[str] = None,
    ):
        self.voter_repo = voter_repo
        self.admin_repo = admin_repo
        self.identity_mode = identity_mode or settings.VOTER_IDENTITY_MODE

    # ========================================================================
    # Voters
    # ========================================================================

    async def login_voter(self, name: str, email: Optional[str] = None) -> tuple[VoterDocument, str]:
        """
        Find or create a voter and issue a token.

        In ``name`` mode two people entering the same name share one voter.
        In ``email`` mode the email is the identity and new voters start
        unverified until an admin verifies them.
        """
        name = " ".join(name.split())
        if not name:
            raise AuthenticationError("Name is required")

        if self.identity_mode == "email":
            if not email:
                raise AuthenticationError("Email is required")
            key = login_key("voter-email", email)
            candidate = VoterDocument(name=name, email=email.lower(), is_verified=False)
        else:
            key = login_key("voter-name", name)
            candidate = VoterDocument(name=name, email=email, is_verified=True)

        voter, created = await self.voter_repo.get_or_create(key, candidate)
        logger.info("voter_login", voter_id=voter.id, created=created, mode=self.identity_mode)
        return voter, create_access_token(voter.id, ROLE_VOTER)

    async def set_voter_verified(self, voter_id: str, is_verified: bool) -> VoterDocument:
        voter = await self.voter_repo.set_verified(voter_id, is_verified)
        if voter is None:
            raise NotFoundError(f"Voter {voter_id} not found")
        logger.info("voter_verification_changed", voter_id=voter_id, is_verified=is_verified)
        return voter

    # ========================================================================
    # Admins
    # ========================================================================

    async def request_admin_code(self, email: str, name: Optional[str] = None) -> int:
        """
        Issue a one-time code for an admin, registering the admin on first use.

        Returns:
            Minutes until the code expires
        """
        email = email.strip().lower()
        admin = await self.admin_repo.get_or_create(AdminDocument(email=email, name=name or email.split("@")[0]))

        otp = generate_otp()
        admin.otp_hash = hash_otp(otp)
        admin.otp_expires_at = utcnow() + timedelta(minutes=settings.ADMIN_OTP_EXPIRE_MINUTES)
        admin.otp_failed_attempts = 0
        await self.admin_repo.save(admin)

        logger.info(
            "admin_login_code_issued",
            admin_id=admin.id,
            email=email,
            code=otp,
            expires_in_minutes=settings.ADMIN_OTP_EXPIRE_MINUTES,
        )
        return settings.ADMIN_OTP_EXPIRE_MINUTES

    async def verify_admin_code(self, email: str, otp: str) -> tuple[AdminDocument, str]:
        """
        Exchange a one-time code for an access token. A code works once.

        Raises:
            AuthenticationError: unknown admin, no pending code, expired or wrong code.
                A code is discarded after ADMIN_OTP_MAX_ATTEMPTS wrong guesses.
        """
        admin = await self.admin_repo.get_by_email(email.strip().lower())
        if admin is None or not admin.otp_hash or not admin.otp_expires_at:
            raise AuthenticationError("Invalid or expired code")

        if admin.otp_expires_at < utcnow():
            logger.warning("admin_login_code_expired", admin_id=admin.id)
            raise AuthenticationError("Invalid or expired code")

        if not verify_otp(otp, admin.otp_hash):
            attempts = await self.admin_repo.record_otp_failure(admin.id)
            if attempts >= settings.ADMIN_OTP_MAX_ATTEMPTS:
                # Too many guesses: the admin has to request a new code
                await self.admin_repo.clear_otp(admin.id)
                logger.warning("admin_login_code_locked", admin_id=admin.id, attempts=attempts)
            else:
                logger.warning("admin_login_code_rejected", admin_id=admin.id, attempts=attempts)
            raise AuthenticationError("Invalid or expired code")

        admin.otp_hash = None
        admin.otp_expires_at = None
        admin.otp_failed_attempts = 0
        admin.is_verified = True
        admin.last_login_at = utcnow()
        await self.admin_repo.save(admin)

        logger.info("admin_login", admin_id=admin.id)
        return admin, create_access_token(admin.id, ROLE_ADMIN)
