"""
Dependency injection for FastAPI endpoints.

Shared resources (config, database, classifier) live on ``app.state`` and are
created once per app in ``create_app``; sessions, stores and services are
created per request.
"""

from typing import Generator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from timelens.config.manager import ConfigManager
from timelens.database.models import User
from timelens.services.event_service import EventService
from timelens.services.event_store import EventStore


def get_config(request: Request) -> ConfigManager:
    return request.app.state.config


def get_classifier(request: Request):
    return request.app.state.classifier


def get_db(request: Request) -> Generator[Session, None, None]:
    """Database session for the duration of one request"""
    db = request.app.state.db_manager.get_session()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> EventStore:
    return EventStore(db)


def get_event_service(store: EventStore = Depends(get_store),
                      classifier=Depends(get_classifier)) -> EventService:
    return EventService(store, classifier)


def get_current_user(request: Request,
                     store: EventStore = Depends(get_store),
                     config: ConfigManager = Depends(get_config)) -> User:
    """
    Resolve the user bound to this session.

    In demo mode a session without a user is bound to the demo account, which
    is looked up in the store on each such request rather than cached.
    """
    user_id = request.session.get('user_id')
    if user_id:
        user = store.get_user(user_id)
        if user:
            return user
        request.session.pop('user_id', None)

    demo_username = config.get('app.demo_username')
    if demo_username:
        user = store.get_or_create_user(demo_username)
        request.session['user_id'] = user.id
        return user

    raise HTTPException(status_code=401, detail="Not signed in")
