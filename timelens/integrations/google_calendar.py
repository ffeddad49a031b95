from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
import logging

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..utils.datetime_utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)

TOKEN_URI = 'https://oauth2.googleapis.com/token'
SCOPES = [
    'https://www.googleapis.com/auth/calendar.readonly',
    'https://www.googleapis.com/auth/userinfo.profile',
    'https://www.googleapis.com/auth/userinfo.email'
]


class GoogleCalendarError(Exception):
    pass


class GoogleCalendarClient:
    """Reads events with an access token obtained elsewhere (no OAuth flow here)"""

    def __init__(self, access_token: str, refresh_token: Optional[str] = None,
                 client_id: Optional[str] = None, client_secret: Optional[str] = None,
                 service=None):
        self.credentials = Credentials(
            token=access_token,
            refresh_token=refresh_token,
            token_uri=TOKEN_URI,
            client_id=client_id,
            client_secret=client_secret,
            scopes=SCOPES,
        )
        self.service = service or self._get_service()

    def _get_service(self):
        """Initialize the Google Calendar service"""
        try:
            service = build('calendar', 'v3', credentials=self.credentials, cache_discovery=False)
            logger.info("Initialized Google Calendar service")
            return service
        except Exception as e:
            logger.error(f"Failed to initialize Google Calendar service: {str(e)}")
            raise GoogleCalendarError(f"Could not connect to Google Calendar: {e}") from e

    def get_events(self, calendar_id: str = 'primary', time_min: Optional[datetime] = None,
                   time_max: Optional[datetime] = None, max_results: int = 250) -> List[Dict[str, Any]]:
        """Get expanded single events, ordered by start time"""
        # Default: 30 days back, 7 days ahead
        now = utc_now()
        time_min = ensure_utc(time_min) if time_min else now - timedelta(days=30)
        time_max = ensure_utc(time_max) if time_max else now + timedelta(days=7)

        logger.info(f"Fetching events for calendar {calendar_id} from {time_min.isoformat()} to {time_max.isoformat()}")

        request = self.service.events().list(
            calendarId=calendar_id,
            timeMin=time_min.isoformat(),
            timeMax=time_max.isoformat(),
            maxResults=max_results,
            singleEvents=True,
            orderBy='startTime'
        )

        events = []
        try:
            while request is not None:
                response = request.execute()
                events.extend(response.get('items', []))
                request = self.service.events().list_next(request, response)
        except (HttpError, RefreshError) as e:
            logger.error(f"Error getting events for calendar {calendar_id}: {str(e)}")
            raise GoogleCalendarError(f"Google Calendar request failed: {e}") from e

        return events
