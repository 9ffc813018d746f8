from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, EmailStr, Field

from compass.core.enums import ServiceStatus
from compass.models.common import CompassBaseModel, WebUrl
from compass.services.query_engine import Pagination


class _ServiceFields(CompassBaseModel):
    description: Optional[str] = None
    subcategory: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[WebUrl] = None
    hours_of_operation: Optional[str] = None
    eligibility_requirements: Optional[str] = None
    languages_spoken: Optional[List[str]] = None
    accessibility_features: Optional[List[str]] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    model_config = ConfigDict(str_strip_whitespace=True)


class ServiceCreate(_ServiceFields):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    # accepted for compatibility, never stored: new services start pending
    status: Optional[ServiceStatus] = None


class ServiceUpdate(_ServiceFields):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)


class ServiceStatusUpdate(CompassBaseModel):
    status: ServiceStatus


class ProviderSummary(CompassBaseModel):
    id: str
    organization_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ServiceOut(CompassBaseModel):
    id: str
    provider_id: str
    name: str
    description: Optional[str] = None
    category: str
    subcategory: Optional[str] = None
    address: str
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    hours_of_operation: Optional[str] = None
    eligibility_requirements: Optional[str] = None
    languages_spoken: List[str] = Field(default_factory=list)
    accessibility_features: List[str] = Field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: ServiceStatus
    view_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    distance: Optional[float] = None
    provider: Optional[ProviderSummary] = None
    events: Optional[list] = None


class ServiceListResponse(CompassBaseModel):
    services: List[ServiceOut]
    pagination: Pagination


class ServiceResponse(CompassBaseModel):
    service: ServiceOut


class ServiceMessageResponse(CompassBaseModel):
    message: str
    service: Optional[ServiceOut] = None


class ServiceCollectionResponse(CompassBaseModel):
    services: List[ServiceOut]
