from datetime import datetime, timedelta, timezone

import pytest

from timelens.models.enums import Category, Confidence

START = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def user(store):
    return store.get_or_create_user("ada@example.com")


@pytest.fixture
def calendar(store, user):
    return store.create_calendar(user.id, "Work", color="#10b981")


def add_event(store, calendar, offset_hours=0, hours=1, title="Standup"):
    start = START + timedelta(hours=offset_hours)
    return store.create_event({
        'calendar_id': calendar.id,
        'title': title,
        'start_time': start,
        'end_time': start + timedelta(hours=hours),
        'category': Category.WORK,
        'confidence': Confidence.MEDIUM,
    })


def test_get_or_create_user_is_idempotent(store):
    first = store.get_or_create_user("ada@example.com")
    second = store.get_or_create_user("ada@example.com")

    assert first.id == second.id
    assert store.get_user(first.id).username == "ada@example.com"


def test_create_calendar_defaults(store, user):
    calendar = store.create_calendar(user.id, "Personal")

    assert calendar.color == "#3b82f6"
    assert calendar.is_active is True
    assert calendar.created_at is not None


def test_deactivated_calendars_leave_listings(store, user, calendar):
    other = store.create_calendar(user.id, "Gym")
    assert {c.id for c in store.list_user_calendars(user.id)} == {calendar.id, other.id}

    assert store.deactivate_calendar(other.id)

    assert [c.id for c in store.list_user_calendars(user.id)] == [calendar.id]
    # soft delete: still retrievable by id
    assert store.get_calendar(other.id).is_active is False


def test_event_gets_uuid_and_timestamps(store, calendar):
    event = add_event(store, calendar)

    assert len(event.id) == 36
    assert event.category == "work"
    assert event.confidence == "medium"
    assert event.created_at == event.updated_at
    # stored as naive UTC
    assert event.start_time == datetime(2026, 10, 19, 9, 0)


def test_update_event_refreshes_updated_at(store, calendar):
    event = add_event(store, calendar)
    created = event.created_at

    updated = store.update_event(event.id, {'title': "Sprint review"})

    assert updated.title == "Sprint review"
    assert updated.created_at == created
    assert updated.updated_at >= created


def test_update_missing_event_returns_none(store):
    assert store.update_event("missing", {'title': "x"}) is None
    assert store.delete_event("missing") is False


def test_upsert_event(store, calendar):
    fields = {
        'calendar_id': calendar.id,
        'title': "Imported",
        'start_time': START,
        'end_time': START + timedelta(hours=1),
    }
    store.upsert_event("evt-1", fields)
    store.upsert_event("evt-1", {**fields, 'title': "Imported again"})

    events = store.list_calendar_events(calendar.id)
    assert [e.title for e in events] == ["Imported again"]


def test_user_events_are_ordered_and_filtered(store, user, calendar):
    late = add_event(store, calendar, offset_hours=5, title="Late")
    early = add_event(store, calendar, offset_hours=-48, title="Early")
    middle = add_event(store, calendar, offset_hours=1, title="Middle")

    assert [e.id for e in store.list_events_for_user(user.id)] == [early.id, middle.id, late.id]
    assert [e.id for e in store.list_events_for_user(user.id, since=START)] == [middle.id, late.id]
    assert [e.id for e in store.list_events_for_user(user.id, since=START, until=START + timedelta(hours=3))] == [middle.id]


def test_user_events_skip_inactive_calendars_and_other_users(store, user, calendar):
    add_event(store, calendar, title="Mine")
    hidden = store.create_calendar(user.id, "Old")
    add_event(store, hidden, title="Hidden")
    stranger = store.get_or_create_user("bob@example.com")
    add_event(store, store.create_calendar(stranger.id, "Bob's"), title="Bob's")

    store.deactivate_calendar(hidden.id)

    assert [e.title for e in store.list_events_for_user(user.id)] == ["Mine"]


def test_delete_event(store, calendar):
    event = add_event(store, calendar)

    assert store.delete_event(event.id) is True
    assert store.get_event(event.id) is None
