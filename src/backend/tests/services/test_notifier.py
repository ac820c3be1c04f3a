"""Tests for the change notifier."""

import asyncio

import pytest

from services.notifier import ChangeNotifier, EventChanged, VoteCast


def _vote(event_id: str, total: int) -> VoteCast:
    return VoteCast(event_id=event_id, team_name="A", total_votes=total)


@pytest.mark.unit
class TestChangeNotifier:
    def test_publish_without_subscribers(self):
        notifier = ChangeNotifier(queue_size=5)
        assert notifier.publish("event-1", _vote("event-1", 1)) == 0

    @pytest.mark.asyncio
    async def test_delivers_only_to_subscribers_of_event(self):
        notifier = ChangeNotifier(queue_size=5)
        first = notifier.subscribe("event-1")
        second = notifier.subscribe("event-1")
        other = notifier.subscribe("event-2")

        delivered = notifier.publish("event-1", _vote("event-1", 1))

        assert delivered == 2
        assert (await first.get()).total_votes == 1
        assert (await second.get()).total_votes == 1
        assert other.queue.empty()

    @pytest.mark.asyncio
    async def test_order_follows_publish_order(self):
        notifier = ChangeNotifier(queue_size=5)
        subscription = notifier.subscribe("event-1")

        for total in (1, 2, 3):
            notifier.publish("event-1", _vote("event-1", total))

        assert [(await subscription.get()).total_votes for _ in range(3)] == [1, 2, 3]

    def test_unsubscribe_stops_delivery(self):
        notifier = ChangeNotifier(queue_size=5)
        subscription = notifier.subscribe("event-1")

        notifier.unsubscribe(subscription)
        notifier.unsubscribe(subscription)

        assert notifier.publish("event-1", _vote("event-1", 1)) == 0
        assert notifier.subscriber_count("event-1") == 0

    def test_full_queue_drops_without_raising(self):
        notifier = ChangeNotifier(queue_size=2)
        slow = notifier.subscribe("event-1")
        fast = notifier.subscribe("event-1")

        for total in (1, 2):
            notifier.publish("event-1", _vote("event-1", total))
        fast.queue.get_nowait()

        delivered = notifier.publish("event-1", _vote("event-1", 3))

        assert delivered == 1
        assert slow.queue.qsize() == 2
        assert fast.queue.qsize() == 2

    def test_event_changed_payload(self):
        message = EventChanged(type="event_deleted", event_id="event-1")
        assert message.model_dump() == {"type": "event_deleted", "event_id": "event-1"}

    @pytest.mark.asyncio
    async def test_waiting_subscriber_is_woken(self):
        notifier = ChangeNotifier(queue_size=5)
        subscription = notifier.subscribe("event-1")

        waiter = asyncio.create_task(subscription.get())
        await asyncio.sleep(0)
        notifier.publish("event-1", _vote("event-1", 4))

        assert (await asyncio.wait_for(waiter, timeout=1)).total_votes == 4
