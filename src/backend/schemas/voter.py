"""
Voter and admin profile schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class VoterResponse(BaseModel):
    """Public voter profile."""

    id: str
    name: str
    email: Optional[str] = None
    is_verified: bool
    created_at: datetime
    last_vote_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VoterVerifyUpdate(BaseModel):
    """Admin decision on a voter's verification."""

    is_verified: bool


class AdminResponse(BaseModel):
    """Public admin profile."""

    id: str
    email: str
    name: str
    is_verified: bool
    last_login_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
