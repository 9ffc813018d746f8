from fastapi import APIRouter, Depends

from compass.core.security import get_current_admin
from compass.db.mongo import get_db
from compass.schemas.service import ServiceMessageResponse, ServiceStatusUpdate
from compass.services import directory_service

router = APIRouter(prefix="/admin/services", tags=["Admin Services"])


@router.patch("/{service_id}/status", response_model=ServiceMessageResponse)
async def set_status(
    service_id: str,
    body: ServiceStatusUpdate,
    admin: dict = Depends(get_current_admin),
    db=Depends(get_db),
):
    service = await directory_service.set_service_status(db, admin, service_id, body.status)
    return {"message": f"Service status set to {body.status.value}", "service": service}


@router.delete("/{service_id}", response_model=ServiceMessageResponse, response_model_exclude_none=True)
async def delete_service(
    service_id: str,
    admin: dict = Depends(get_current_admin),
    db=Depends(get_db),
):
    await directory_service.admin_delete_service(db, admin, service_id)
    return {"message": "Service deleted successfully"}
