from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, Dict, List, Optional

from timelens.models.enums import Category, Confidence
from timelens.utils.datetime_utils import ensure_utc


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Classification(BaseModel):
    category: Category
    confidence: Confidence

    def to_dict(self) -> Dict[str, str]:
        return {'category': self.category.value, 'confidence': self.confidence.value}


# Sessions / users

class SessionCreate(CamelModel):
    username: str


class UserResponse(CamelModel):
    id: str
    username: str
    created_at: datetime

    @field_validator('created_at')
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)


# Calendars

class CalendarCreate(CamelModel):
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


class CalendarUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None


class CalendarResponse(CamelModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    color: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @field_validator('created_at', 'updated_at')
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)


# Events

class EventCreate(CamelModel):
    calendar_id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    is_all_day: bool = False


class EventUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    is_all_day: Optional[bool] = None
    category: Optional[Category] = None


class EventResponse(CamelModel):
    id: str
    calendar_id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    category: Optional[Category] = None
    confidence: Optional[Confidence] = None
    is_all_day: bool = False
    location: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator('start_time', 'end_time', 'created_at', 'updated_at')
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)


class ClassifyRequest(CamelModel):
    title: str
    description: Optional[str] = None


# Analytics

class TimeAllocationEntry(CamelModel):
    category: Category
    hours: float
    color: str


class AnalyticsMetrics(CamelModel):
    total_hours: float = 0
    events_count: int = 0
    most_productive_day: str = "N/A"


class AnalyticsSnapshot(CamelModel):
    time_allocation: List[TimeAllocationEntry] = Field(default_factory=list)
    # Sparse: {"date": "Mon", "work": 1.0, ...}, absent categories mean zero
    trends: List[Dict[str, Any]] = Field(default_factory=list)
    metrics: AnalyticsMetrics = Field(default_factory=AnalyticsMetrics)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)


# Google import

class GoogleImportRequest(CamelModel):
    access_token: str
    refresh_token: Optional[str] = None
    google_calendar_id: str = 'primary'
    time_min: Optional[datetime] = None
    time_max: Optional[datetime] = None


class ImportResult(CamelModel):
    """Counts from one import run"""
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)
