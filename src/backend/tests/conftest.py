"""
Pytest fixtures for TeamVote backend tests.
"""

import os
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("COSMOS_RETRY_BACKOFF_SECONDS", "0")

from fakes import (  # noqa: E402
    FakeAdminRepository,
    FakeEventRepository,
    FakeVoteRepository,
    FakeVoterRepository,
)
from models.cosmos_documents import AdminDocument, EventDocument, TeamDocument, VoterDocument  # noqa: E402
from services.notifier import ChangeNotifier  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


# =============================================================================
# Repositories and services
# =============================================================================


@pytest.fixture
def event_repo() -> FakeEventRepository:
    return FakeEventRepository()


@pytest.fixture
def vote_repo() -> FakeVoteRepository:
    return FakeVoteRepository()


@pytest.fixture
def voter_repo() -> FakeVoterRepository:
    return FakeVoterRepository()


@pytest.fixture
def admin_repo() -> FakeAdminRepository:
    return FakeAdminRepository()


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier(queue_size=10)


@pytest.fixture
def admin(admin_repo: FakeAdminRepository) -> AdminDocument:
    return admin_repo.add("admin@example.com", name="Event Admin")


@pytest.fixture
def voter(voter_repo: FakeVoterRepository) -> VoterDocument:
    return voter_repo.add("Alice")


@pytest.fixture
def make_event(event_repo: FakeEventRepository, admin: AdminDocument) -> Callable[..., EventDocument]:
    """
    Store an event directly in the fake repository.

    By default the event opened an hour ago and closes in an hour.
    """

    def _make(
        name: str = "Finals",
        teams: tuple[str, ...] = ("A", "B"),
        start_offset: timedelta = timedelta(hours=-1),
        end_offset: timedelta = timedelta(hours=1),
        is_active: bool = True,
        created_by: Optional[str] = None,
    ) -> EventDocument:
        now = datetime.now(timezone.utc)
        event = EventDocument(
            name=name,
            voting_slug=os.urandom(16).hex(),
            teams=[TeamDocument(name=t) for t in teams],
            start_date=now + start_offset,
            end_date=now + end_offset,
            is_active=is_active,
            created_by=created_by or admin.id,
        )
        event_repo.events[event.id] = event
        return event

    return _make


# =============================================================================
# API
# =============================================================================


@pytest.fixture
async def app(
    event_repo: FakeEventRepository,
    vote_repo: FakeVoteRepository,
    voter_repo: FakeVoterRepository,
    admin_repo: FakeAdminRepository,
    notifier: ChangeNotifier,
) -> AsyncGenerator[Any, None]:
    """FastAPI application wired to the in-memory repositories."""
    from main import app as fastapi_app
    from repositories.provider import (
        get_admin_repository,
        get_event_repository,
        get_vote_repository,
        get_voter_repository,
    )
    from services.notifier import get_notifier

    fastapi_app.dependency_overrides[get_event_repository] = lambda: event_repo
    fastapi_app.dependency_overrides[get_vote_repository] = lambda: vote_repo
    fastapi_app.dependency_overrides[get_voter_repository] = lambda: voter_repo
    fastapi_app.dependency_overrides[get_admin_repository] = lambda: admin_repo
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def admin_headers(admin: AdminDocument) -> dict[str, str]:
    from core.security import ROLE_ADMIN, create_access_token

    return {"Authorization": f"Bearer {create_access_token(admin.id, ROLE_ADMIN)}"}


@pytest.fixture
def voter_headers(voter: VoterDocument) -> dict[str, str]:
    from core.security import ROLE_VOTER, create_access_token

    return {"Authorization": f"Bearer {create_access_token(voter.id, ROLE_VOTER)}"}
