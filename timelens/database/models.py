from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
import uuid

from timelens.models.base import Base
from timelens.utils.datetime_utils import utc_now, to_db_datetime


def _new_id() -> str:
    return str(uuid.uuid4())


def _db_now():
    return to_db_datetime(utc_now())


class User(Base):
    __tablename__ = 'users'

    id = Column(String, primary_key=True, default=_new_id)
    username = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=_db_now)

    calendars = relationship("Calendar", back_populates="user")


class Calendar(Base):
    __tablename__ = 'calendars'

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, ForeignKey('users.id'), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String)
    color = Column(String, nullable=False, default='#3b82f6')
    # Soft-delete marker; inactive calendars drop out of listings and analytics
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=_db_now)
    updated_at = Column(DateTime, nullable=False, default=_db_now)

    user = relationship("User", back_populates="calendars")
    events = relationship("CalendarEvent", back_populates="calendar")


class CalendarEvent(Base):
    __tablename__ = 'calendar_events'

    id = Column(String, primary_key=True, default=_new_id)
    calendar_id = Column(String, ForeignKey('calendars.id'), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(String)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    category = Column(String)  # work/exercise/social/rest/other
    confidence = Column(String)  # high/medium/low
    is_all_day = Column(Boolean, nullable=False, default=False)
    location = Column(String)
    created_at = Column(DateTime, nullable=False, default=_db_now)
    updated_at = Column(DateTime, nullable=False, default=_db_now)

    calendar = relationship("Calendar", back_populates="events")
