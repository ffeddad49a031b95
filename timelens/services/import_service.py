from typing import Any, Dict, Iterable
import logging
import uuid

from ..database.models import Calendar
from ..models.schemas import ImportResult
from ..utils.datetime_utils import parse_google_datetime
from .event_store import EventStore

logger = logging.getLogger(__name__)

# Stable ids so a second import updates instead of duplicating
GOOGLE_EVENT_NAMESPACE = uuid.UUID('6f1c6a52-4b8e-4f0b-9a57-2f4a1c3e9d10')


def local_event_id(calendar_id: str, google_event_id: str) -> str:
    return str(uuid.uuid5(GOOGLE_EVENT_NAMESPACE, f"{calendar_id}:{google_event_id}"))


class GoogleImportService:
    def __init__(self, store: EventStore, classifier, timezone: str = 'UTC'):
        self.store = store
        self.classifier = classifier
        self.timezone = timezone

    def to_event_fields(self, calendar: Calendar, item: Dict[str, Any]) -> Dict[str, Any]:
        """Map a Google event resource onto local event fields"""
        start_time, is_all_day = parse_google_datetime(item.get('start'), self.timezone)
        end_time, _ = parse_google_datetime(item.get('end'), self.timezone)
        if start_time is None or end_time is None:
            raise ValueError("missing start or end")
        if end_time <= start_time:
            raise ValueError("end time is not after start time")

        title = (item.get('summary') or '').strip() or 'Untitled event'
        description = (item.get('description') or '').strip() or None
        classification = self.classifier.classify(title, description)

        return {
            'calendar_id': calendar.id,
            'title': title,
            'description': description,
            'start_time': start_time,
            'end_time': end_time,
            'category': classification.category,
            'confidence': classification.confidence,
            'location': (item.get('location') or '').strip() or None,
            'is_all_day': is_all_day,
        }

    def import_events(self, calendar: Calendar, items: Iterable[Dict[str, Any]]) -> ImportResult:
        result = ImportResult()

        for item in items:
            google_id = item.get('id')
            if not google_id or item.get('status') == 'cancelled':
                result.skipped += 1
                continue

            try:
                fields = self.to_event_fields(calendar, item)
            except ValueError as e:
                logger.warning(f"Skipping Google event {google_id}: {e}")
                result.skipped += 1
                result.errors.append(f"{google_id}: {e}")
                continue

            event_id = local_event_id(calendar.id, google_id)
            if self.store.get_event(event_id):
                result.updated += 1
            else:
                result.created += 1
            self.store.upsert_event(event_id, fields)

        logger.info(
            f"Google import into calendar {calendar.id}: "
            f"{result.created} new, {result.updated} updated, {result.skipped} skipped"
        )
        return result
