from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.models import User, Calendar, CalendarEvent
from ..utils.datetime_utils import utc_now, to_db_datetime

logger = logging.getLogger(__name__)

_DATETIME_FIELDS = ('start_time', 'end_time')


class EventStore:
    """CRUD and owner-filtered range queries over users, calendars and events"""

    def __init__(self, session: Session):
        self.session = session

    def _commit(self, action: str):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error {action}: {str(e)}")
            self.session.rollback()
            raise

    @staticmethod
    def _normalise(fields: Dict[str, Any]) -> Dict[str, Any]:
        values = dict(fields)
        for key in _DATETIME_FIELDS:
            if values.get(key) is not None:
                values[key] = to_db_datetime(values[key])
        for key in ('category', 'confidence'):
            if values.get(key) is not None:
                values[key] = getattr(values[key], 'value', values[key])
        return values

    # Users

    def get_user(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.session.scalars(select(User).where(User.username == username)).first()

    def get_or_create_user(self, username: str) -> User:
        user = self.get_user_by_username(username)
        if user:
            return user

        user = User(username=username)
        self.session.add(user)
        self._commit(f"creating user {username}")
        logger.info(f"Created user {user.id} ({username})")
        return user

    # Calendars

    def create_calendar(self, user_id: str, name: str, description: Optional[str] = None,
                        color: Optional[str] = None) -> Calendar:
        now = to_db_datetime(utc_now())
        calendar = Calendar(
            user_id=user_id,
            name=name,
            description=description,
            color=color or '#3b82f6',
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.session.add(calendar)
        self._commit("creating calendar")
        return calendar

    def get_calendar(self, calendar_id: str) -> Optional[Calendar]:
        return self.session.get(Calendar, calendar_id)

    def list_user_calendars(self, user_id: str) -> List[Calendar]:
        """Active calendars owned by the user"""
        query = (
            select(Calendar)
            .where(Calendar.user_id == user_id, Calendar.is_active.is_(True))
            .order_by(Calendar.created_at)
        )
        return list(self.session.scalars(query))

    def update_calendar(self, calendar_id: str, updates: Dict[str, Any]) -> Optional[Calendar]:
        calendar = self.get_calendar(calendar_id)
        if not calendar:
            return None

        for key, value in updates.items():
            setattr(calendar, key, value)
        calendar.updated_at = to_db_datetime(utc_now())
        self._commit(f"updating calendar {calendar_id}")
        return calendar

    def deactivate_calendar(self, calendar_id: str) -> bool:
        """Soft delete: the calendar and its events stay in the database"""
        return self.update_calendar(calendar_id, {'is_active': False}) is not None

    # Events

    def create_event(self, fields: Dict[str, Any]) -> CalendarEvent:
        now = to_db_datetime(utc_now())
        event = CalendarEvent(**{'created_at': now, 'updated_at': now, **self._normalise(fields)})
        self.session.add(event)
        self._commit("creating event")
        return event

    def get_event(self, event_id: str) -> Optional[CalendarEvent]:
        return self.session.get(CalendarEvent, event_id)

    def update_event(self, event_id: str, updates: Dict[str, Any]) -> Optional[CalendarEvent]:
        event = self.get_event(event_id)
        if not event:
            return None

        for key, value in self._normalise(updates).items():
            setattr(event, key, value)
        event.updated_at = to_db_datetime(utc_now())
        self._commit(f"updating event {event_id}")
        return event

    def upsert_event(self, event_id: str, fields: Dict[str, Any]) -> CalendarEvent:
        if self.get_event(event_id):
            return self.update_event(event_id, fields)
        return self.create_event({**fields, 'id': event_id})

    def delete_event(self, event_id: str) -> bool:
        event = self.get_event(event_id)
        if not event:
            return False

        self.session.delete(event)
        self._commit(f"deleting event {event_id}")
        return True

    def _range_query(self, query, since: Optional[datetime], until: Optional[datetime]):
        if since is not None:
            query = query.where(CalendarEvent.start_time >= to_db_datetime(since))
        if until is not None:
            query = query.where(CalendarEvent.end_time <= to_db_datetime(until))
        return query.order_by(CalendarEvent.start_time)

    def list_calendar_events(self, calendar_id: str, since: Optional[datetime] = None,
                             until: Optional[datetime] = None) -> List[CalendarEvent]:
        query = select(CalendarEvent).where(CalendarEvent.calendar_id == calendar_id)
        return list(self.session.scalars(self._range_query(query, since, until)))

    def list_events_for_user(self, user_id: str, since: Optional[datetime] = None,
                             until: Optional[datetime] = None) -> List[CalendarEvent]:
        """Events across the user's active calendars, ordered by start time"""
        query = (
            select(CalendarEvent)
            .join(Calendar, CalendarEvent.calendar_id == Calendar.id)
            .where(Calendar.user_id == user_id, Calendar.is_active.is_(True))
        )
        return list(self.session.scalars(self._range_query(query, since, until)))
