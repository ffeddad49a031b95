from .event_store import EventStore
from .event_service import EventService, EventValidationError, NotFoundError
from .analytics import AnalyticsWindow, aggregate, weekly_breakdown
from .import_service import GoogleImportService

__all__ = [
    'EventStore', 'EventService', 'EventValidationError', 'NotFoundError',
    'AnalyticsWindow', 'aggregate', 'weekly_breakdown', 'GoogleImportService',
]
