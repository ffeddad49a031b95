from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from timelens.models.enums import Category, Confidence
from timelens.models.schemas import EventCreate, EventUpdate
from timelens.nlp.classifier import KeywordClassifier
from timelens.services.event_service import EventService, EventValidationError, NotFoundError

START = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def classifier():
    return MagicMock(wraps=KeywordClassifier())


@pytest.fixture
def service(store, classifier):
    return EventService(store, classifier)


@pytest.fixture
def user(store):
    return store.get_or_create_user("ada@example.com")


@pytest.fixture
def calendar(store, user):
    return store.create_calendar(user.id, "Main")


def create(service, user, calendar, **overrides):
    fields = dict(
        calendar_id=calendar.id,
        title="Team lunch meeting",
        start_time=START,
        end_time=START + timedelta(hours=1),
    )
    fields.update(overrides)
    return service.create_event(user, EventCreate(**fields))


def test_create_classifies_and_trims(service, user, calendar):
    event = create(service, user, calendar, title="  Morning run ", description="  ", location=" Park ")

    assert event.title == "Morning run"
    assert event.description is None
    assert event.location == "Park"
    assert event.category == Category.EXERCISE.value
    assert event.confidence == Confidence.MEDIUM.value


def test_create_rejects_bad_time_range(service, user, calendar):
    with pytest.raises(EventValidationError):
        create(service, user, calendar, end_time=START)
    with pytest.raises(EventValidationError):
        create(service, user, calendar, end_time=START - timedelta(minutes=5))


def test_create_rejects_blank_title(service, user, calendar):
    with pytest.raises(EventValidationError):
        create(service, user, calendar, title="   ")


def test_create_in_foreign_calendar_is_not_found(service, store, calendar):
    stranger = store.get_or_create_user("bob@example.com")

    with pytest.raises(NotFoundError):
        create(service, stranger, calendar)


def test_update_reclassifies_when_text_changes(service, user, calendar, classifier):
    event = create(service, user, calendar)
    assert event.category == "work"
    classifier.classify.reset_mock()

    updated = service.update_event(user, event.id, EventUpdate(title="Birthday dinner"))

    classifier.classify.assert_called_once_with("Birthday dinner", None)
    assert updated.category == "social"
    assert updated.confidence == "medium"


def test_update_description_change_reclassifies(service, user, calendar, classifier):
    event = create(service, user, calendar, title="Thursday")
    assert event.category == "other"

    updated = service.update_event(user, event.id, EventUpdate(description="yoga class"))

    assert updated.category == "exercise"


def test_update_without_text_change_keeps_category(service, user, calendar, classifier):
    event = create(service, user, calendar)
    classifier.classify.reset_mock()

    updated = service.update_event(
        user, event.id, EventUpdate(title="Team lunch meeting", end_time=START + timedelta(hours=2))
    )

    classifier.classify.assert_not_called()
    assert updated.category == "work"
    assert updated.end_time == datetime(2026, 10, 19, 11, 0)


def test_manual_category_is_high_confidence(service, user, calendar):
    event = create(service, user, calendar)

    updated = service.update_event(user, event.id, EventUpdate(category=Category.SOCIAL))

    assert updated.category == "social"
    assert updated.confidence == "high"


def test_update_rejects_inverted_range(service, user, calendar):
    event = create(service, user, calendar)

    with pytest.raises(EventValidationError):
        service.update_event(user, event.id, EventUpdate(start_time=START + timedelta(hours=3)))


def test_update_and_delete_foreign_event_not_found(service, store, user, calendar):
    event = create(service, user, calendar)
    stranger = store.get_or_create_user("bob@example.com")

    with pytest.raises(NotFoundError):
        service.update_event(stranger, event.id, EventUpdate(title="Mine now"))
    with pytest.raises(NotFoundError):
        service.delete_event(stranger, event.id)

    assert service.delete_event(user, event.id) is True
    with pytest.raises(NotFoundError):
        service.delete_event(user, event.id)
