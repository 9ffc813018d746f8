from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from compass.core.security import get_current_admin
from compass.db.mongo import get_db
from compass.schemas.provider import (
    AdminResponse,
    ProviderAdminUpdate,
    ProviderCreate,
    ProviderListResponse,
    ProviderMessageResponse,
    ProviderResponse,
)
from compass.services import providers_service
from compass.services.query_engine import DEFAULT_LIMIT, DEFAULT_PAGE

router = APIRouter(prefix="/admin", tags=["Admin Providers"])


@router.get("/me", response_model=AdminResponse)
async def me(admin: dict = Depends(get_current_admin), db=Depends(get_db)):
    return {"admin": await providers_service.get_admin_profile(db, admin)}


# ========================
# LIST PROVIDERS
# ========================
@router.get("/providers", response_model=ProviderListResponse)
async def list_providers(
    search: Optional[str] = Query(None),
    verified: Optional[bool] = Query(None),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    admin: dict = Depends(get_current_admin),
    db=Depends(get_db),
):
    return await providers_service.list_providers(
        db, search=search, verified=verified, page=page, limit=limit
    )


# ========================
# CREATE PROVIDER
# ========================
@router.post("/providers", response_model=ProviderMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_provider(
    body: ProviderCreate,
    admin: dict = Depends(get_current_admin),
    db=Depends(get_db),
):
    provider = await providers_service.create_provider(db, admin, body)
    return {"message": "Provider created successfully", "provider": provider}


# ========================
# GET ONE PROVIDER
# ========================
@router.get("/providers/{provider_id}", response_model=ProviderResponse)
async def get_provider(
    provider_id: str,
    admin: dict = Depends(get_current_admin),
    db=Depends(get_db),
):
    return {"provider": await providers_service.get_provider(db, provider_id)}


# ========================
# UPDATE PROVIDER
# ========================
@router.put("/providers/{provider_id}", response_model=ProviderMessageResponse)
async def update_provider(
    provider_id: str,
    body: ProviderAdminUpdate,
    admin: dict = Depends(get_current_admin),
    db=Depends(get_db),
):
    provider = await providers_service.update_provider(db, admin, provider_id, body)
    return {"message": "Provider updated successfully", "provider": provider}


# ========================
# DELETE PROVIDER
# ========================
@router.delete(
    "/providers/{provider_id}",
    response_model=ProviderMessageResponse,
    response_model_exclude_none=True,
)
async def delete_provider(
    provider_id: str,
    admin: dict = Depends(get_current_admin),
    db=Depends(get_db),
):
    await providers_service.delete_provider(db, admin, provider_id)
    return {"message": "Provider deleted successfully"}
