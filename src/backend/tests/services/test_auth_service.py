"""Tests for voter and admin sign-in."""

from datetime import timedelta

import pytest

from core.errors import AuthenticationError, NotFoundError
from core.security import ROLE_ADMIN, ROLE_VOTER, decode_token, hash_otp
from models.cosmos_documents import utcnow
from services.auth_service import AuthService


@pytest.mark.unit
class TestVoterLogin:
    @pytest.mark.asyncio
    async def test_name_mode_creates_then_finds_same_voter(self, voter_repo, admin_repo):
        service = AuthService(voter_repo, admin_repo, identity_mode="name")

        first, token = await service.login_voter("Bob")
        second, _ = await service.login_voter("  bob ")

        assert first.id == second.id
        assert first.is_verified is True
        payload = decode_token(token)
        assert payload["sub"] == first.id
        assert payload["role"] == ROLE_VOTER

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, voter_repo, admin_repo):
        service = AuthService(voter_repo, admin_repo, identity_mode="name")
        with pytest.raises(AuthenticationError):
            await service.login_voter("   ")

    @pytest.mark.asyncio
    async def test_email_mode_requires_email(self, voter_repo, admin_repo):
        service = AuthService(voter_repo, admin_repo, identity_mode="email")
        with pytest.raises(AuthenticationError):
            await service.login_voter("Bob")

    @pytest.mark.asyncio
    async def test_email_mode_keys_by_email_and_starts_unverified(self, voter_repo, admin_repo):
        service = AuthService(voter_repo, admin_repo, identity_mode="email")

        bob, _ = await service.login_voter("Bob", "Bob@Example.com")
        other_bob, _ = await service.login_voter("Bob", "bob2@example.com")
        again, _ = await service.login_voter("Robert", "bob@example.com")

        assert bob.is_verified is False
        assert bob.email == "bob@example.com"
        assert other_bob.id != bob.id
        assert again.id == bob.id

    @pytest.mark.asyncio
    async def test_set_voter_verified(self, voter_repo, admin_repo, voter):
        service = AuthService(voter_repo, admin_repo)

        updated = await service.set_voter_verified(voter.id, False)

        assert updated.is_verified is False

    @pytest.mark.asyncio
    async def test_set_unknown_voter_verified(self, voter_repo, admin_repo):
        service = AuthService(voter_repo, admin_repo)
        with pytest.raises(NotFoundError):
            await service.set_voter_verified("missing", True)


@pytest.mark.unit
class TestAdminLogin:
    @pytest.mark.asyncio
    async def test_request_code_registers_admin_and_stores_hash(self, voter_repo, admin_repo):
        service = AuthService(voter_repo, admin_repo)

        expires_in = await service.request_admin_code("Owner@Example.com", "Owner")

        admin = await admin_repo.get_by_email("owner@example.com")
        assert admin is not None
        assert admin.name == "Owner"
        assert admin.otp_hash is not None
        assert len(admin.otp_hash) == 64
        assert admin.otp_expires_at > utcnow()
        assert expires_in == 10

    @pytest.mark.asyncio
    async def test_verify_code_issues_admin_token_once(self, voter_repo, admin_repo, admin):
        service = AuthService(voter_repo, admin_repo)
        stored = admin_repo.admins[admin.id]
        stored.otp_hash = hash_otp("123456")
        stored.otp_expires_at = utcnow() + timedelta(minutes=5)

        verified, token = await service.verify_admin_code(admin.email, "123456")

        assert verified.id == admin.id
        assert verified.last_login_at is not None
        payload = decode_token(token)
        assert payload["role"] == ROLE_ADMIN
        assert payload["sub"] == admin.id

        with pytest.raises(AuthenticationError):
            await service.verify_admin_code(admin.email, "123456")

    @pytest.mark.asyncio
    async def test_wrong_code_rejected(self, voter_repo, admin_repo, admin):
        service = AuthService(voter_repo, admin_repo)
        stored = admin_repo.admins[admin.id]
        stored.otp_hash = hash_otp("123456")
        stored.otp_expires_at = utcnow() + timedelta(minutes=5)

        with pytest.raises(AuthenticationError):
            await service.verify_admin_code(admin.email, "654321")

    @pytest.mark.asyncio
    async def test_expired_code_rejected(self, voter_repo, admin_repo, admin):
        service = AuthService(voter_repo, admin_repo)
        stored = admin_repo.admins[admin.id]
        stored.otp_hash = hash_otp("123456")
        stored.otp_expires_at = utcnow() - timedelta(seconds=1)

        with pytest.raises(AuthenticationError):
            await service.verify_admin_code(admin.email, "123456")

    @pytest.mark.asyncio
    async def test_unknown_admin_rejected(self, voter_repo, admin_repo):
        service = AuthService(voter_repo, admin_repo)
        with pytest.raises(AuthenticationError):
            await service.verify_admin_code("nobody@example.com", "123456")


@pytest.mark.unit
class TestAdminCodeGuessLimit:
    @pytest.mark.asyncio
    async def test_code_discarded_after_too_many_wrong_guesses(self, voter_repo, admin_repo, admin):
        from core.config import settings

        service = AuthService(voter_repo, admin_repo)
        stored = admin_repo.admins[admin.id]
        stored.otp_hash = hash_otp("000777")
        stored.otp_expires_at = utcnow() + timedelta(minutes=5)

        for guess in range(settings.ADMIN_OTP_MAX_ATTEMPTS):
            with pytest.raises(AuthenticationError):
                await service.verify_admin_code(admin.email, f"{guess:06d}")

        assert admin_repo.admins[admin.id].otp_hash is None
        with pytest.raises(AuthenticationError):
            await service.verify_admin_code(admin.email, "000777")

    @pytest.mark.asyncio
    async def test_new_code_resets_failures(self, voter_repo, admin_repo, admin, monkeypatch):
        service = AuthService(voter_repo, admin_repo)
        monkeypatch.setattr("services.auth_service.generate_otp", lambda: "482913")

        await service.request_admin_code(admin.email)
        with pytest.raises(AuthenticationError):
            await service.verify_admin_code(admin.email, "000000")
        assert admin_repo.admins[admin.id].otp_failed_attempts == 1

        await service.request_admin_code(admin.email)
        assert admin_repo.admins[admin.id].otp_failed_attempts == 0

        verified, _ = await service.verify_admin_code(admin.email, "482913")
        assert verified.id == admin.id
