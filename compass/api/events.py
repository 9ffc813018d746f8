# compass/api/events.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from compass.api.deps import build_listing_query
from compass.core.enums import DEFAULT_EVENT_STATUSES, EventStatus
from compass.core.security import get_current_provider
from compass.db.mongo import get_db
from compass.schemas.event import (
    EventCreate,
    EventListResponse,
    EventMessageResponse,
    EventResponse,
    EventUpdate,
    naive_utc,
)
from compass.services import events_service
from compass.services.query_engine import DEFAULT_LIMIT, DEFAULT_PAGE, DEFAULT_RADIUS_MILES

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=EventListResponse)
async def list_events(
    service_id: Optional[str] = Query(None, alias="serviceId"),
    category: Optional[str] = Query(None),
    subcategory: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_MILES, gt=0, description="miles"),
    status_: Optional[EventStatus] = Query(None, alias="status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    db=Depends(get_db),
):
    query = build_listing_query(
        category=category,
        subcategory=subcategory,
        search=search,
        latitude=latitude,
        longitude=longitude,
        radius=radius,
        status=status_.value if status_ else None,
        default_statuses=DEFAULT_EVENT_STATUSES,
        page=page,
        limit=limit,
    )
    return await events_service.list_events(
        db,
        query,
        service_id=service_id,
        start_from=naive_utc(start_date),
        start_to=naive_utc(end_date),
    )


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: str, db=Depends(get_db)):
    return {"event": await events_service.get_event(db, event_id)}


@router.post("", response_model=EventMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: EventCreate,
    provider: dict = Depends(get_current_provider),
    db=Depends(get_db),
):
    event = await events_service.create_event(db, provider, body)
    return {"message": "Event created successfully", "event": event}


@router.put("/{event_id}", response_model=EventMessageResponse)
async def update_event(
    event_id: str,
    body: EventUpdate,
    provider: dict = Depends(get_current_provider),
    db=Depends(get_db),
):
    event = await events_service.update_event(db, provider, event_id, body)
    return {"message": "Event updated successfully", "event": event}


@router.delete("/{event_id}", response_model=EventMessageResponse, response_model_exclude_none=True)
async def delete_event(
    event_id: str,
    provider: dict = Depends(get_current_provider),
    db=Depends(get_db),
):
    await events_service.delete_event(db, provider, event_id)
    return {"message": "Event deleted successfully"}
