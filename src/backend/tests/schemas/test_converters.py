"""Tests for the schema converters."""

from datetime import datetime, timedelta, timezone

import pytest

from models.cosmos_documents import AdminDocument, EventDocument, TeamDocument, VoteDocument
from schemas.converters import (
    admin_document_to_schema,
    event_document_to_public_summary,
    event_document_to_schema,
    event_document_to_voter_schema,
    history_item,
)


@pytest.fixture
def event_doc():
    start = datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)
    return EventDocument(
        id="event-1",
        name="Finals",
        voting_slug="f" * 32,
        teams=[TeamDocument(id="team-a", name="A"), TeamDocument(id="team-b", name="B", color="#FF0000")],
        start_date=start,
        end_date=start + timedelta(hours=2),
        total_votes=4,
        created_by="admin-1",
    )


class TestEventDocumentToSchema:
    """Tests for event_document_to_schema converter."""

    def test_open_flag_follows_given_time(self, event_doc):
        inside = event_doc.start_date + timedelta(minutes=30)
        after = event_doc.end_date + timedelta(seconds=1)

        assert event_document_to_schema(event_doc, inside).is_currently_open is True
        assert event_document_to_schema(event_doc, after).is_currently_open is False

    def test_copies_teams_in_order(self, event_doc):
        schema = event_document_to_schema(event_doc, event_doc.start_date)

        assert [(t.id, t.name, t.color) for t in schema.teams] == [
            ("team-a", "A", "#3B82F6"),
            ("team-b", "B", "#FF0000"),
        ]
        assert schema.total_votes == 4

    def test_voter_schema_carries_has_voted(self, event_doc):
        assert event_document_to_voter_schema(event_doc, has_voted=True).has_voted is True

    def test_public_summary_hides_slug_and_teams(self, event_doc):
        summary = event_document_to_public_summary(event_doc).model_dump()

        assert "voting_slug" not in summary
        assert "teams" not in summary
        assert summary["id"] == "event-1"


class TestHistoryItem:
    def test_uses_current_team_name(self, event_doc):
        vote = VoteDocument(id="v", event_id="event-1", voter_id="v", team_id="team-b", team_name="Old B")

        assert history_item(vote, event_doc).team == "B"

    def test_falls_back_to_recorded_name(self, event_doc):
        vote = VoteDocument(id="v", event_id="event-1", voter_id="v", team_id="removed", team_name="Gone")

        item = history_item(vote, event_doc)

        assert item.team == "Gone"
        assert item.event_name == "Finals"
        assert item.event_end_date == event_doc.end_date


class TestAdminDocumentToSchema:
    def test_does_not_expose_code_hash(self):
        admin = AdminDocument(email="owner@example.com", name="Owner", otp_hash="secret-hash")

        data = admin_document_to_schema(admin).model_dump()

        assert "otp_hash" not in data
        assert data["email"] == "owner@example.com"
