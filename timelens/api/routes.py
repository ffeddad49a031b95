from datetime import datetime
from typing import Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from timelens.config.manager import ConfigManager
from timelens.database.models import User
from timelens.integrations.google_calendar import GoogleCalendarClient, GoogleCalendarError
from timelens.models.schemas import (
    AnalyticsSnapshot, CalendarCreate, CalendarResponse, CalendarUpdate, Classification,
    ClassifyRequest, EventCreate, EventResponse, EventUpdate, GoogleImportRequest,
    ImportResult, SessionCreate, UserResponse,
)
from timelens.services.analytics import AnalyticsWindow, aggregate, weekly_breakdown
from timelens.services.event_service import EventService, NotFoundError, clean_text
from timelens.services.event_store import EventStore
from timelens.services.import_service import GoogleImportService

from .dependencies import (
    get_classifier, get_config, get_current_user, get_event_service, get_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# Session

@router.post("/session", response_model=UserResponse)
def sign_in(payload: SessionCreate, request: Request, store: EventStore = Depends(get_store)):
    """Bind the session to a user, creating the user on first sign-in"""
    username = payload.username.strip()
    if not username:
        raise HTTPException(status_code=400, detail="Username is required")

    user = store.get_or_create_user(username)
    request.session['user_id'] = user.id
    logger.info(f"Session bound to user {user.id}")
    return user


@router.get("/session", response_model=UserResponse)
def current_session(user: User = Depends(get_current_user)):
    return user


@router.delete("/session")
def sign_out(request: Request):
    request.session.clear()
    return {"success": True}


# Calendars

@router.get("/calendars", response_model=List[CalendarResponse])
def list_calendars(user: User = Depends(get_current_user), store: EventStore = Depends(get_store)):
    """Get the user's active calendars"""
    calendars = store.list_user_calendars(user.id)
    logger.debug(f"Found {len(calendars)} calendars for user {user.id}")
    return calendars


@router.post("/calendars", response_model=CalendarResponse, status_code=201)
def create_calendar(payload: CalendarCreate,
                    user: User = Depends(get_current_user),
                    store: EventStore = Depends(get_store)):
    name = (payload.name or '').strip()
    if not name:
        raise HTTPException(status_code=400, detail="Calendar name is required")

    calendar = store.create_calendar(
        user_id=user.id,
        name=name,
        description=(payload.description or '').strip() or None,
        color=payload.color,
    )
    logger.info(f"Created calendar {calendar.id} for user {user.id}")
    return calendar


@router.put("/calendars/{calendar_id}", response_model=CalendarResponse)
def update_calendar(calendar_id: str,
                    payload: CalendarUpdate,
                    user: User = Depends(get_current_user),
                    store: EventStore = Depends(get_store),
                    service: EventService = Depends(get_event_service)):
    service.get_owned_calendar(user, calendar_id)

    updates = payload.model_dump(exclude_unset=True)
    if 'name' in updates:
        updates['name'] = (updates['name'] or '').strip()
        if not updates['name']:
            raise HTTPException(status_code=400, detail="Calendar name cannot be empty")
    if 'description' in updates:
        updates['description'] = (updates['description'] or '').strip() or None
    if 'color' in updates and not updates['color']:
        del updates['color']

    return store.update_calendar(calendar_id, updates)


@router.delete("/calendars/{calendar_id}")
def delete_calendar(calendar_id: str,
                    user: User = Depends(get_current_user),
                    store: EventStore = Depends(get_store),
                    service: EventService = Depends(get_event_service)):
    """Deactivate a calendar; its events are kept but leave analytics"""
    service.get_owned_calendar(user, calendar_id)
    store.deactivate_calendar(calendar_id)
    return {"success": True}


@router.get("/calendars/{calendar_id}/events", response_model=List[EventResponse])
def list_calendar_events(calendar_id: str,
                         start_date: Optional[datetime] = Query(None, alias="startDate"),
                         end_date: Optional[datetime] = Query(None, alias="endDate"),
                         user: User = Depends(get_current_user),
                         service: EventService = Depends(get_event_service)):
    return service.list_calendar_events(user, calendar_id, start_date, end_date)


@router.post("/calendars/{calendar_id}/import/google", response_model=ImportResult)
def import_google_events(calendar_id: str,
                         payload: GoogleImportRequest,
                         user: User = Depends(get_current_user),
                         store: EventStore = Depends(get_store),
                         service: EventService = Depends(get_event_service),
                         config: ConfigManager = Depends(get_config),
                         classifier=Depends(get_classifier)):
    """Pull events from Google Calendar into a local calendar, classifying each"""
    calendar = service.get_owned_calendar(user, calendar_id)

    try:
        client = GoogleCalendarClient(
            access_token=payload.access_token,
            refresh_token=payload.refresh_token,
            **config.get_google_credentials()
        )
        items = client.get_events(payload.google_calendar_id, payload.time_min, payload.time_max)
    except GoogleCalendarError as e:
        raise HTTPException(status_code=502, detail=str(e))

    importer = GoogleImportService(store, classifier, config.get('app.timezone', 'UTC'))
    return importer.import_events(calendar, items)


# Events

@router.get("/events", response_model=List[EventResponse])
def list_events(start_date: Optional[datetime] = Query(None, alias="startDate"),
                end_date: Optional[datetime] = Query(None, alias="endDate"),
                user: User = Depends(get_current_user),
                store: EventStore = Depends(get_store)):
    """All events across the user's active calendars"""
    return store.list_events_for_user(user.id, start_date, end_date)


@router.post("/events", response_model=EventResponse, status_code=201)
def create_event(payload: EventCreate,
                 user: User = Depends(get_current_user),
                 service: EventService = Depends(get_event_service)):
    return service.create_event(user, payload)


@router.put("/events/{event_id}", response_model=EventResponse)
def update_event(event_id: str,
                 payload: EventUpdate,
                 user: User = Depends(get_current_user),
                 service: EventService = Depends(get_event_service)):
    return service.update_event(user, event_id, payload)


@router.delete("/events/{event_id}")
def delete_event(event_id: str,
                 user: User = Depends(get_current_user),
                 service: EventService = Depends(get_event_service)):
    if not service.delete_event(user, event_id):
        raise NotFoundError("Event not found")
    return {"success": True}


@router.post("/classify", response_model=Classification)
def classify(payload: ClassifyRequest, classifier=Depends(get_classifier)):
    """Preview the category an event with this text would get"""
    title = clean_text(payload.title)
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    return classifier.classify(title, clean_text(payload.description))


# Analytics

def _snapshot(user: User, store: EventStore, config: ConfigManager, days: Optional[int]) -> AnalyticsSnapshot:
    window = AnalyticsWindow.trailing(
        days=days or config.get('app.analytics_days', 7),
        timezone=config.get('app.timezone', 'UTC'),
    )
    events = store.list_events_for_user(user.id, since=window.since)
    return aggregate(events, window)


@router.get("/analytics")
def get_analytics(days: Optional[int] = Query(None, ge=1, le=366),
                  user: User = Depends(get_current_user),
                  store: EventStore = Depends(get_store),
                  config: ConfigManager = Depends(get_config)) -> Dict:
    """Time allocation, daily trends and summary metrics for the trailing window"""
    return _snapshot(user, store, config, days).to_dict()


@router.get("/analytics/weekly")
def get_weekly_analytics(days: Optional[int] = Query(None, ge=1, le=366),
                         user: User = Depends(get_current_user),
                         store: EventStore = Depends(get_store),
                         config: ConfigManager = Depends(get_config)) -> List[Dict]:
    snapshot = _snapshot(user, store, config, days)
    return weekly_breakdown(snapshot.trends)
