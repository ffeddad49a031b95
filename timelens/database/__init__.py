from timelens.database.connection import DatabaseManager
from timelens.database.models import User, Calendar, CalendarEvent

__all__ = ['DatabaseManager', 'User', 'Calendar', 'CalendarEvent']
