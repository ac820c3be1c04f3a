"""
Authentication-related Pydantic schemas.

Voters sign in by display name (or email, depending on VOTER_IDENTITY_MODE).
Admins sign in with a one-time code - no passwords.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field

from schemas.voter import AdminResponse, VoterResponse


class VoterLoginRequest(BaseModel):
    """Voter login. ``email`` is required when voters are identified by email."""

    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None


class AdminLoginRequest(BaseModel):
    """Request a one-time login code for an admin."""

    email: EmailStr
    name: Optional[str] = Field(None, max_length=100)


class AdminVerifyRequest(BaseModel):
    """Exchange a one-time code for an access token."""

    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


class CodeSentResponse(BaseModel):
    """Acknowledgement that a login code was issued."""

    message: str
    expires_in_minutes: int


class TokenResponse(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"
    role: Literal["admin", "voter"]
    user: Union[AdminResponse, VoterResponse]


class MeResponse(BaseModel):
    """The authenticated principal."""

    role: Literal["admin", "voter"]
    user: Union[AdminResponse, VoterResponse]
