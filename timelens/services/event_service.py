from datetime import datetime
from typing import List, Optional
import logging

from ..database.models import User, Calendar, CalendarEvent
from ..models.enums import Confidence
from ..models.schemas import EventCreate, EventUpdate
from ..utils.datetime_utils import ensure_utc
from .event_store import EventStore

logger = logging.getLogger(__name__)


class EventValidationError(ValueError):
    """Rejected event input, e.g. an empty title or end before start"""


class NotFoundError(LookupError):
    pass


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def validate_time_range(start_time: datetime, end_time: datetime):
    if ensure_utc(end_time) <= ensure_utc(start_time):
        raise EventValidationError("End time must be after start time")


class EventService:
    """Create/update path: validates, classifies, persists"""

    def __init__(self, store: EventStore, classifier):
        self.store = store
        self.classifier = classifier

    def get_owned_calendar(self, user: User, calendar_id: str) -> Calendar:
        calendar = self.store.get_calendar(calendar_id)
        if not calendar or calendar.user_id != user.id:
            raise NotFoundError("Calendar not found")
        return calendar

    def get_owned_event(self, user: User, event_id: str) -> CalendarEvent:
        event = self.store.get_event(event_id)
        if not event:
            raise NotFoundError("Event not found")
        calendar = self.store.get_calendar(event.calendar_id)
        if not calendar or calendar.user_id != user.id:
            raise NotFoundError("Event not found")
        return event

    def create_event(self, user: User, payload: EventCreate) -> CalendarEvent:
        title = clean_text(payload.title)
        if not payload.calendar_id or not title:
            raise EventValidationError("Calendar ID, title, start time, and end time are required")
        validate_time_range(payload.start_time, payload.end_time)

        self.get_owned_calendar(user, payload.calendar_id)

        description = clean_text(payload.description)
        classification = self.classifier.classify(title, description)

        event = self.store.create_event({
            'calendar_id': payload.calendar_id,
            'title': title,
            'description': description,
            'start_time': payload.start_time,
            'end_time': payload.end_time,
            'category': classification.category,
            'confidence': classification.confidence,
            'location': clean_text(payload.location),
            'is_all_day': payload.is_all_day,
        })
        logger.info(f"Created event {event.id} as {event.category} ({event.confidence})")
        return event

    def update_event(self, user: User, event_id: str, payload: EventUpdate) -> CalendarEvent:
        event = self.get_owned_event(user, event_id)
        changes = payload.model_dump(exclude_unset=True)

        if 'title' in changes:
            changes['title'] = clean_text(changes['title'])
            if not changes['title']:
                raise EventValidationError("Title cannot be empty")
        for key in ('description', 'location'):
            if key in changes:
                changes[key] = clean_text(changes[key])
        # Explicit nulls for non-nullable columns mean "leave as is"
        for key in ('start_time', 'end_time', 'is_all_day', 'category'):
            if key in changes and changes[key] is None:
                del changes[key]

        validate_time_range(
            changes.get('start_time', event.start_time),
            changes.get('end_time', event.end_time),
        )

        new_title = changes.get('title', event.title)
        new_description = changes['description'] if 'description' in changes else event.description
        if new_title != event.title or new_description != event.description:
            classification = self.classifier.classify(new_title, new_description)
            changes['category'] = classification.category
            changes['confidence'] = classification.confidence
        elif 'category' in changes:
            # A category picked by hand is taken as certain
            changes['confidence'] = Confidence.HIGH

        updated = self.store.update_event(event_id, changes)
        logger.info(f"Updated event {event_id}")
        return updated

    def delete_event(self, user: User, event_id: str) -> bool:
        self.get_owned_event(user, event_id)
        return self.store.delete_event(event_id)

    def list_calendar_events(self, user: User, calendar_id: str, since: Optional[datetime] = None,
                             until: Optional[datetime] = None) -> List[CalendarEvent]:
        self.get_owned_calendar(user, calendar_id)
        return self.store.list_calendar_events(calendar_id, since, until)
