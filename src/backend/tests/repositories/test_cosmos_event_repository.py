"""
Tests for Cosmos DB event repository.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from models.cosmos_documents import EventDocument, TeamDocument
from repositories.cosmos_event_repository import CosmosEventRepository


@pytest.fixture
def sample_event_doc():
    """Create a sample event document."""
    now = datetime.now(timezone.utc)
    return EventDocument(
        id="event-1",
        name="Finals",
        voting_slug="0123456789abcdef0123456789abcdef",
        teams=[TeamDocument(id="team-a", name="A"), TeamDocument(id="team-b", name="B")],
        start_date=now - timedelta(hours=1),
        end_date=now + timedelta(hours=1),
        created_by="admin-1",
    )


@pytest.mark.unit
class TestCosmosEventRepository:
    """Test CosmosEventRepository operations."""

    @pytest.mark.asyncio
    async def test_get_by_id(self, sample_event_doc) -> None:
        with patch("repositories.cosmos_event_repository.read_item") as mock_read:
            mock_read.return_value = sample_event_doc.model_dump(mode="json")

            result = await CosmosEventRepository().get_by_id("event-1")

            assert result is not None
            assert result.teams[1].id == "team-b"
            assert result.start_date.tzinfo is not None
            mock_read.assert_called_once_with("events", "event-1", partition_key="event-1")

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self) -> None:
        with patch("repositories.cosmos_event_repository.read_item") as mock_read:
            mock_read.return_value = None

            assert await CosmosEventRepository().get_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_get_by_slug(self, sample_event_doc) -> None:
        with patch("repositories.cosmos_event_repository.query_items") as mock_query:
            mock_query.return_value = [sample_event_doc.model_dump(mode="json")]

            result = await CosmosEventRepository().get_by_slug(sample_event_doc.voting_slug)

            assert result is not None
            assert result.id == "event-1"
            assert mock_query.call_args.kwargs["parameters"] == [
                {"name": "@slug", "value": sample_event_doc.voting_slug}
            ]

    @pytest.mark.asyncio
    async def test_get_by_slug_missing(self) -> None:
        with patch("repositories.cosmos_event_repository.query_items") as mock_query:
            mock_query.return_value = []

            assert await CosmosEventRepository().get_by_slug("nope") is None

    @pytest.mark.asyncio
    async def test_apply_update_patches_only_given_fields(self, sample_event_doc) -> None:
        with patch("repositories.cosmos_event_repository.patch_item") as mock_patch:
            mock_patch.return_value = {**sample_event_doc.model_dump(mode="json"), "name": "Grand Finals"}

            result = await CosmosEventRepository().apply_update("event-1", {"name": "Grand Finals"})

            assert result is not None
            assert result.name == "Grand Finals"
            operations = mock_patch.call_args.kwargs["operations"]
            paths = {op["path"] for op in operations}
            assert paths == {"/name", "/updated_at"}
            assert all(op["op"] == "set" for op in operations)

    @pytest.mark.asyncio
    async def test_apply_update_serializes_teams(self, sample_event_doc) -> None:
        with patch("repositories.cosmos_event_repository.patch_item") as mock_patch:
            mock_patch.return_value = sample_event_doc.model_dump(mode="json")

            await CosmosEventRepository().apply_update("event-1", {"teams": sample_event_doc.teams})

            operations = mock_patch.call_args.kwargs["operations"]
            teams_op = next(op for op in operations if op["path"] == "/teams")
            assert teams_op["value"][0]["id"] == "team-a"

    @pytest.mark.asyncio
    async def test_apply_update_rejects_counter(self) -> None:
        with patch("repositories.cosmos_event_repository.patch_item") as mock_patch:
            with pytest.raises(ValueError):
                await CosmosEventRepository().apply_update("event-1", {"total_votes": 0})
            mock_patch.assert_not_called()

    @pytest.mark.asyncio
    async def test_increment_total_votes_uses_incr(self) -> None:
        with patch("repositories.cosmos_event_repository.patch_item") as mock_patch:
            mock_patch.return_value = {"id": "event-1", "total_votes": 5}

            total = await CosmosEventRepository().increment_total_votes("event-1")

            assert total == 5
            assert mock_patch.call_args.kwargs["operations"] == [
                {"op": "incr", "path": "/total_votes", "value": 1}
            ]

    @pytest.mark.asyncio
    async def test_increment_deleted_event(self) -> None:
        with patch("repositories.cosmos_event_repository.patch_item") as mock_patch:
            mock_patch.return_value = None

            assert await CosmosEventRepository().increment_total_votes("gone") is None

    @pytest.mark.asyncio
    async def test_list_by_owner(self, sample_event_doc) -> None:
        with patch("repositories.cosmos_event_repository.query_items") as mock_query:
            mock_query.return_value = [sample_event_doc.model_dump(mode="json")]

            events = await CosmosEventRepository().list_by_owner("admin-1")

            assert [e.id for e in events] == ["event-1"]
            assert mock_query.call_args.kwargs["parameters"] == [{"name": "@admin_id", "value": "admin-1"}]
