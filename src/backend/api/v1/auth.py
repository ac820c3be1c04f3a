"""
Authentication endpoints.

Voters sign in with their name (or email); admins request a one-time code
and exchange it for an access token.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import Principal, get_auth_service, get_current_principal
from core.errors import AuthenticationError
from core.security import ROLE_ADMIN, ROLE_VOTER
from schemas.auth import (
    AdminLoginRequest,
    AdminVerifyRequest,
    CodeSentResponse,
    MeResponse,
    TokenResponse,
    VoterLoginRequest,
)
from schemas.converters import admin_document_to_schema, voter_document_to_schema
from services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/voter/login", response_model=TokenResponse)
async def voter_login(
    request: VoterLoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """
    Sign in as a voter, creating the voter on first login.
    """
    try:
        voter, token = await auth_service.login_voter(request.name, request.email)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    return TokenResponse(
        access_token=token,
        role=ROLE_VOTER,
        user=voter_document_to_schema(voter),
    )


@router.post("/admin/login", response_model=CodeSentResponse)
async def admin_login(
    request: AdminLoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> CodeSentResponse:
    """
    Request a one-time login code for an admin account.

    The account is registered on first use.
    """
    expires_in = await auth_service.request_admin_code(request.email, request.name)
    return CodeSentResponse(
        message="Login code sent",
        expires_in_minutes=expires_in,
    )


@router.post("/admin/verify-otp", response_model=TokenResponse)
async def admin_verify_otp(
    request: AdminVerifyRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """
    Exchange a one-time login code for an access token.
    """
    try:
        admin, token = await auth_service.verify_admin_code(request.email, request.otp)
    except AuthenticationError as e:
        logger.info("admin_verify_failed", email=request.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    return TokenResponse(
        access_token=token,
        role=ROLE_ADMIN,
        user=admin_document_to_schema(admin),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(
    principal: Annotated[Principal, Depends(get_current_principal)],
) -> MeResponse:
    """
    Get the signed-in admin or voter.
    """
    if principal.role == ROLE_ADMIN:
        user = admin_document_to_schema(principal.user)
    else:
        user = voter_document_to_schema(principal.user)
    return MeResponse(role=principal.role, user=user)
