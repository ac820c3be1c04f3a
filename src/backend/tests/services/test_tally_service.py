"""Tests for the tally service."""

import random

import pytest

from core.errors import EventNotFoundError
from services.admission_service import VoteAdmissionService
from services.tally_service import TallyService, percentage


@pytest.fixture
def tally(event_repo, vote_repo, voter_repo):
    return TallyService(event_repo, vote_repo, voter_repo)


@pytest.fixture
def admission(event_repo, vote_repo):
    return VoteAdmissionService(event_repo, vote_repo)


@pytest.mark.unit
class TestPercentage:
    def test_zero_total(self):
        assert percentage(0, 0) == 0.0

    def test_rounds_to_two_places(self):
        assert percentage(1, 3) == 33.33
        assert percentage(2, 3) == 66.67


@pytest.mark.unit
class TestComputeStats:
    @pytest.mark.asyncio
    async def test_no_votes_gives_zero_rows(self, tally, make_event):
        event = make_event(teams=("A", "B", "C"))

        stats = await tally.compute_stats(event.id)

        assert stats.total_votes == 0
        assert [(t.name, t.votes, t.percentage) for t in stats.teams] == [
            ("A", 0, 0.0),
            ("B", 0, 0.0),
            ("C", 0, 0.0),
        ]

    @pytest.mark.asyncio
    async def test_rows_follow_team_order_with_colors(self, tally, make_event):
        event = make_event(teams=("Zulu", "Alpha"))

        stats = await tally.compute_stats(event.id)

        assert [t.name for t in stats.teams] == ["Zulu", "Alpha"]
        assert [t.team_id for t in stats.teams] == [t.id for t in event.teams]
        assert all(t.color == "#3B82F6" for t in stats.teams)

    @pytest.mark.asyncio
    async def test_counts_sum_to_total_and_percentages_to_100(self, tally, admission, make_event, voter_repo):
        event = make_event(teams=("A", "B", "C"))
        rng = random.Random(7)
        n = 37
        for i in range(n):
            await admission.admit_vote(event.id, voter_repo.add(f"voter-{i}").id, rng.choice(["A", "B", "C"]))

        stats = await tally.compute_stats(event.id)

        assert stats.total_votes == n
        assert sum(t.votes for t in stats.teams) == n
        assert sum(t.percentage for t in stats.teams) == pytest.approx(100, abs=0.02)

    @pytest.mark.asyncio
    async def test_total_comes_from_ledger_not_counter(self, tally, admission, make_event, event_repo, voter):
        event = make_event()
        await admission.admit_vote(event.id, voter.id, "A")
        event_repo.events[event.id].total_votes = 99

        stats = await tally.compute_stats(event.id)

        assert stats.total_votes == 1

    @pytest.mark.asyncio
    async def test_idempotent(self, tally, admission, make_event, voter_repo):
        event = make_event()
        await admission.admit_vote(event.id, voter_repo.add("V1").id, "A")
        await admission.admit_vote(event.id, voter_repo.add("V2").id, "B")

        assert await tally.compute_stats(event.id) == await tally.compute_stats(event.id)

    @pytest.mark.asyncio
    async def test_missing_event(self, tally):
        with pytest.raises(EventNotFoundError):
            await tally.compute_stats("missing")

    @pytest.mark.asyncio
    async def test_by_slug(self, tally, admission, make_event, voter):
        event = make_event()
        await admission.admit_vote(event.id, voter.id, "B")

        found, stats = await tally.compute_stats_by_slug(event.voting_slug)

        assert found.id == event.id
        assert stats.teams[1].votes == 1

    @pytest.mark.asyncio
    async def test_by_unknown_slug(self, tally):
        with pytest.raises(EventNotFoundError):
            await tally.compute_stats_by_slug("nope")


@pytest.mark.unit
class TestVoterBreakdown:
    @pytest.mark.asyncio
    async def test_lists_voters_with_current_team_names(self, tally, admission, make_event, voter_repo, event_repo):
        event = make_event()
        alice = voter_repo.add("Alice", email="alice@example.com")
        await admission.admit_vote(event.id, alice.id, "A")
        event_repo.events[event.id].teams[0].name = "Alpha"

        entries = await tally.voter_breakdown(event_repo.events[event.id])

        assert len(entries) == 1
        assert entries[0].voter_name == "Alice"
        assert entries[0].voter_email == "alice@example.com"
        assert entries[0].team == "Alpha"


@pytest.mark.unit
class TestVotesForRemovedTeams:
    @pytest.mark.asyncio
    async def test_rows_always_sum_to_total(self, tally, admission, make_event, vote_repo, voter_repo):
        from models.cosmos_documents import VoteDocument

        event = make_event(teams=("A", "B"))
        await admission.admit_vote(event.id, voter_repo.add("V1").id, "A")
        # Vote admitted for a team while an edit was removing it
        late = VoteDocument(id="late", event_id=event.id, voter_id="late", team_id="removed-team", team_name="C")
        vote_repo.votes[(event.id, "late")] = late

        stats = await tally.compute_stats(event.id)

        assert stats.total_votes == 1
        assert sum(t.votes for t in stats.teams) == stats.total_votes
        assert [t.percentage for t in stats.teams] == [100.0, 0.0]
