"""
Tests for token issuing and one-time code helpers.
"""

from datetime import timedelta

import pytest
from jose import jwt

from core.config import settings
from core.security import (
    OTP_LENGTH,
    ROLE_ADMIN,
    ROLE_VOTER,
    create_access_token,
    decode_token,
    generate_otp,
    generate_voting_slug,
    hash_otp,
    verify_otp,
)


@pytest.mark.unit
class TestAccessTokens:
    """Tests for JWT access tokens."""

    def test_round_trip_carries_subject_and_role(self):
        token = create_access_token("voter-1", ROLE_VOTER)

        payload = decode_token(token)

        assert payload is not None
        assert payload["sub"] == "voter-1"
        assert payload["role"] == ROLE_VOTER
        assert payload["type"] == "access"

    def test_expired_token_rejected(self):
        token = create_access_token("admin-1", ROLE_ADMIN, expires_delta=timedelta(seconds=-5))

        assert decode_token(token) is None

    def test_tampered_token_rejected(self):
        token = create_access_token("admin-1", ROLE_ADMIN)

        assert decode_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB")) is None

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode(
            {"sub": "admin-1", "role": ROLE_ADMIN, "type": "access"},
            "some-other-key",
            algorithm=settings.JWT_ALGORITHM,
        )

        assert decode_token(token) is None

    def test_wrong_type_rejected(self):
        token = create_access_token("voter-1", ROLE_VOTER)

        assert decode_token(token, expected_type="refresh") is None

    def test_garbage_rejected(self):
        assert decode_token("not-a-jwt") is None


@pytest.mark.unit
class TestRandomTokens:
    def test_voting_slug_is_128_bit_hex(self):
        slug = generate_voting_slug()

        assert len(slug) == 32
        int(slug, 16)

    def test_voting_slugs_differ(self):
        assert len({generate_voting_slug() for _ in range(50)}) == 50

    def test_otp_is_numeric(self):
        otp = generate_otp()

        assert len(otp) == OTP_LENGTH
        assert otp.isdigit()


@pytest.mark.unit
class TestOtpHashing:
    def test_hash_is_not_the_code(self):
        otp_hash = hash_otp("123456")

        assert otp_hash != "123456"
        assert len(otp_hash) == 64

    def test_verify(self):
        otp_hash = hash_otp("123456")

        assert verify_otp("123456", otp_hash)
        assert not verify_otp("123457", otp_hash)
