from typing import Optional

from fastapi import APIRouter, Query

from compass.api.deps import build_listing_query
from compass.opendata.orchestrator import fetch_services
from compass.opendata.registry import default_registry
from compass.schemas.open_data import OpenDataListResponse
from compass.services.query_engine import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    DEFAULT_RADIUS_MILES,
    filter_open_data,
)

router = APIRouter(prefix="/open-data", tags=["Open Data"])


@router.get("/categories")
async def list_categories():
    return {"categories": default_registry.categories()}


@router.get("/services", response_model=OpenDataListResponse)
async def list_open_data_services(
    category: str = Query(..., min_length=1),
    subcategory: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_MILES, gt=0, description="miles"),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
):
    # category/subcategory already pick the feeds, the engine only narrows further
    query = build_listing_query(
        category=None,
        subcategory=None,
        search=search,
        latitude=latitude,
        longitude=longitude,
        radius=radius,
        status=None,
        default_statuses=None,
        page=page,
        limit=limit,
    )
    fetched = await fetch_services(category, subcategory)
    result = filter_open_data(fetched.services, query)

    services = [
        r.record.model_copy(update={"distance": r.distance}) if r.distance is not None else r.record
        for r in result.items
    ]
    return {
        "services": services,
        "pagination": result.pagination,
        "errors": fetched.errors,
        "rejected": [{"source": r.source, "reason": r.reason} for r in fetched.rejections],
    }
