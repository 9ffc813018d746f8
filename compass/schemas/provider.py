from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, EmailStr, Field

from compass.models.common import CompassBaseModel
from compass.services.query_engine import Pagination


# -------------------------
# Requests (INPUT)
# -------------------------
class ProviderCreate(CompassBaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    organization_name: str = Field(..., min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class ProviderProfileUpdate(CompassBaseModel):
    organization_name: Optional[str] = Field(None, min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class ProviderAdminUpdate(ProviderProfileUpdate):
    email: Optional[EmailStr] = None
    verified: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6)


# -------------------------
# Responses (OUTPUT)
# -------------------------
class ProviderCounts(CompassBaseModel):
    services: int = 0
    events: int = 0


class ProviderOut(CompassBaseModel):
    id: str
    email: str
    organization_name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    counts: Optional[ProviderCounts] = None


class ProviderResponse(CompassBaseModel):
    provider: ProviderOut


class ProviderMessageResponse(CompassBaseModel):
    message: str
    provider: Optional[ProviderOut] = None


class ProviderListResponse(CompassBaseModel):
    providers: List[ProviderOut]
    pagination: Pagination


class AdminOut(CompassBaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[datetime] = None
    providers_created: Optional[int] = None


class AdminResponse(CompassBaseModel):
    admin: AdminOut
