"""Security utilities for authentication and authorization.

Issues and validates role-scoped JWT access tokens, and generates the
random tokens used for public voting slugs and admin one-time codes.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from core.config import settings

# Token issuer and audience for validation
TOKEN_ISSUER = "teamvote-api"
TOKEN_AUDIENCE = "teamvote-client"

ROLE_ADMIN = "admin"
ROLE_VOTER = "voter"

OTP_LENGTH = 6


def create_access_token(
    subject: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token for an admin or voter."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": subject,
        "role": role,
        "exp": expire,
        "iat": now,
        "type": "access",
        "iss": TOKEN_ISSUER,
        "aud": TOKEN_AUDIENCE,
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, expected_type: str | None = "access") -> dict[str, Any] | None:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token to decode
        expected_type: If provided, validates the token type matches

    Returns:
        The decoded payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=TOKEN_ISSUER,
            audience=TOKEN_AUDIENCE,
        )
        if expected_type and payload.get("type") != expected_type:
            return None
        return payload
    except JWTError:
        return None


def generate_voting_slug() -> str:
    """Generate the unguessable public token for an event (128 bits, hex)."""
    return secrets.token_hex(16)


def generate_otp() -> str:
    """Generate a numeric one-time login code."""
    return "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))


def hash_otp(otp: str) -> str:
    """Hash a one-time code with the server secret so it is never stored in clear."""
    data = f"{otp}:{settings.SECRET_KEY}"
    return hashlib.sha256(data.encode()).hexdigest()


def verify_otp(otp: str, otp_hash: str) -> bool:
    """Constant-time comparison of a submitted code against its stored hash."""
    return hmac.compare_digest(hash_otp(otp), otp_hash)
