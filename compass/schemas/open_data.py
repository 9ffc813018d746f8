from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import Field

from compass.models.common import CompassBaseModel
from compass.services.query_engine import Pagination

HOURS_NOT_AVAILABLE = "Hours not available"
PHONE_NOT_AVAILABLE = "Phone not available"


class OpenDataService(CompassBaseModel):
    id: str
    name: str = Field(..., min_length=1)
    description: str
    category: str
    subcategory: str
    # (longitude, latitude)
    coordinates: Tuple[float, float]
    address: str
    hours: str = HOURS_NOT_AVAILABLE
    phone: str = PHONE_NOT_AVAILABLE
    website: Optional[str] = None
    distance: Optional[float] = None


class Rejection(CompassBaseModel):
    source: str
    reason: str
    record: Dict[str, Any] = Field(default_factory=dict)


class RejectionOut(CompassBaseModel):
    source: str
    reason: str


class OpenDataListResponse(CompassBaseModel):
    services: List[OpenDataService]
    pagination: Pagination
    errors: Optional[List[str]] = None
    rejected: List[RejectionOut] = Field(default_factory=list)
