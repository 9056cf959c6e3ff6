import pytest

from guesthouse.models import Expense, Guest, Room
from guesthouse.services.events import ChangeEvent, EventBus, bus, mark_changed


def test_subscribe_and_unsubscribe():
    local = EventBus()
    seen = []
    sub = local.subscribe("rooms", seen.append)
    local.publish("rooms")
    sub.unsubscribe()
    sub.unsubscribe()
    local.publish("rooms")
    assert seen == [ChangeEvent(entity="rooms")]
    assert local.subscriber_count("rooms") == 0


def test_unknown_entity_is_rejected():
    with pytest.raises(ValueError):
        EventBus().subscribe("bookings", lambda evt: None)


def test_guest_changes_also_notify_rooms():
    local = EventBus()
    seen = []
    with local.subscribe("rooms", seen.append), local.subscribe("guests", seen.append):
        local.publish("guests")
    assert [e.entity for e in seen] == ["guests", "rooms"]
    assert local.subscriber_count("guests") == 0


def test_failing_subscriber_does_not_block_others():
    local = EventBus()
    seen = []

    def boom(evt):
        raise RuntimeError("view gone")

    local.subscribe("expenses", boom)
    local.subscribe("expenses", seen.append)
    local.publish("expenses")
    assert len(seen) == 1


def test_commit_publishes_touched_collections(db):
    seen = []
    with bus.subscribe("expenses", seen.append), bus.subscribe("rooms", seen.append):
        db.add(Expense(description="Tea", amount=20))
        db.flush()
        assert seen == []
        db.commit()
    assert [e.entity for e in seen] == ["expenses"]


def test_rollback_publishes_nothing(db):
    seen = []
    with bus.subscribe("rooms", seen.append):
        db.add(Room(room_number="900", room_type="AC", status="Available", price=0))
        db.flush()
        db.rollback()
    assert seen == []


def test_bulk_changes_are_published_when_marked(db):
    seen = []
    with bus.subscribe("guests", seen.append):
        db.query(Guest).update({Guest.is_frequent: True}, synchronize_session=False)
        mark_changed(db, "guests")
        db.commit()
    assert [e.entity for e in seen] == ["guests"]


def test_api_writes_notify_subscribers(client):
    seen = []
    with bus.subscribe("rooms", seen.append):
        client.post("/api/v1/rooms", json={"room_number": "1", "room_type": "AC"})
    assert [e.entity for e in seen] == ["rooms"]
