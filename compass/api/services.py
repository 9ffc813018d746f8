# compass/api/services.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from compass.api.deps import build_listing_query
from compass.core.enums import DEFAULT_SERVICE_STATUSES, ServiceStatus
from compass.core.security import get_current_provider
from compass.db.mongo import get_db
from compass.schemas.service import (
    ServiceCreate,
    ServiceListResponse,
    ServiceMessageResponse,
    ServiceResponse,
    ServiceUpdate,
)
from compass.services import directory_service
from compass.services.query_engine import DEFAULT_LIMIT, DEFAULT_PAGE, DEFAULT_RADIUS_MILES

router = APIRouter(prefix="/services", tags=["Services"])


@router.get("", response_model=ServiceListResponse)
async def list_services(
    category: Optional[str] = Query(None),
    subcategory: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_MILES, gt=0, description="miles"),
    status_: Optional[ServiceStatus] = Query(None, alias="status"),
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
        default_statuses=DEFAULT_SERVICE_STATUSES,
        page=page,
        limit=limit,
    )
    return await directory_service.list_services(db, query)


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: str, db=Depends(get_db)):
    return {"service": await directory_service.get_service(db, service_id)}


@router.post("", response_model=ServiceMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    body: ServiceCreate,
    provider: dict = Depends(get_current_provider),
    db=Depends(get_db),
):
    service = await directory_service.create_service(db, provider, body)
    return {"message": "Service created successfully (pending approval)", "service": service}


@router.put("/{service_id}", response_model=ServiceMessageResponse)
async def update_service(
    service_id: str,
    body: ServiceUpdate,
    provider: dict = Depends(get_current_provider),
    db=Depends(get_db),
):
    service = await directory_service.update_service(db, provider, service_id, body)
    return {"message": "Service updated successfully", "service": service}


@router.delete("/{service_id}", response_model=ServiceMessageResponse, response_model_exclude_none=True)
async def delete_service(
    service_id: str,
    provider: dict = Depends(get_current_provider),
    db=Depends(get_db),
):
    await directory_service.delete_service(db, provider, service_id)
    return {"message": "Service deleted successfully"}
