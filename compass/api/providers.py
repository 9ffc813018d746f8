from fastapi import APIRouter, Depends

from compass.core.security import get_current_provider
from compass.db.mongo import get_db
from compass.schemas.event import EventCollectionResponse
from compass.schemas.provider import ProviderMessageResponse, ProviderProfileUpdate, ProviderResponse
from compass.schemas.service import ServiceCollectionResponse
from compass.services import directory_service, events_service, providers_service

router = APIRouter(prefix="/providers", tags=["Providers"])


@router.get("/me", response_model=ProviderResponse)
async def me(provider: dict = Depends(get_current_provider), db=Depends(get_db)):
    return {"provider": await providers_service.get_me(db, provider)}


@router.put("/me", response_model=ProviderMessageResponse)
async def update_me(
    body: ProviderProfileUpdate,
    provider: dict = Depends(get_current_provider),
    db=Depends(get_db),
):
    updated = await providers_service.update_me(db, provider, body)
    return {"message": "Profile updated successfully", "provider": updated}


@router.get("/me/services", response_model=ServiceCollectionResponse)
async def my_services(provider: dict = Depends(get_current_provider), db=Depends(get_db)):
    return {"services": await directory_service.services_for_provider(db, provider["id"])}


@router.get("/me/events", response_model=EventCollectionResponse)
async def my_events(provider: dict = Depends(get_current_provider), db=Depends(get_db)):
    return {"events": await events_service.events_for_provider(db, provider["id"])}
