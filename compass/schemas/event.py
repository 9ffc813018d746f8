from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from compass.core.enums import EventStatus, LocationType
from compass.models.common import CompassBaseModel, WebUrl
from compass.schemas.service import ProviderSummary
from compass.services.query_engine import Pagination


def naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    # mongo hands back naive UTC datetimes, so store them that way too
    if v is None or v.tzinfo is None:
        return v
    return v.astimezone(timezone.utc).replace(tzinfo=None)


class _EventFields(CompassBaseModel):
    description: Optional[str] = None
    service_id: Optional[str] = None
    event_type: Optional[str] = None
    end_date: Optional[datetime] = None
    location_type: Optional[LocationType] = None
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    virtual_link: Optional[WebUrl] = None
    capacity: Optional[int] = Field(None, ge=1)
    registration_required: Optional[bool] = None
    registration_url: Optional[WebUrl] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("end_date", mode="after")
    @classmethod
    def _end_utc(cls, v):
        return naive_utc(v)


class EventCreate(_EventFields):
    title: str = Field(..., min_length=1)
    start_date: datetime
    status: EventStatus = EventStatus.upcoming

    @field_validator("start_date", mode="after")
    @classmethod
    def _start_utc(cls, v):
        return naive_utc(v)


class EventUpdate(_EventFields):
    title: Optional[str] = Field(None, min_length=1)
    start_date: Optional[datetime] = None
    status: Optional[EventStatus] = None

    @field_validator("start_date", mode="after")
    @classmethod
    def _start_utc(cls, v):
        return naive_utc(v)


class ServiceBrief(CompassBaseModel):
    id: str
    name: str
    address: Optional[str] = None
    category: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None


class EventOut(CompassBaseModel):
    id: str
    provider_id: str
    service_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    event_type: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    location_type: Optional[LocationType] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    virtual_link: Optional[str] = None
    capacity: Optional[int] = None
    registration_required: Optional[bool] = None
    registration_url: Optional[str] = None
    status: EventStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    distance: Optional[float] = None
    service: Optional[ServiceBrief] = None
    provider: Optional[ProviderSummary] = None


class EventListResponse(CompassBaseModel):
    events: List[EventOut]
    pagination: Pagination


class EventResponse(CompassBaseModel):
    event: EventOut


class EventMessageResponse(CompassBaseModel):
    message: str
    event: Optional[EventOut] = None


class EventCollectionResponse(CompassBaseModel):
    events: List[EventOut]
