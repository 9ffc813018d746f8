from typing import Optional

from fastapi import APIRouter, Depends, Query

from compass.core.security import get_current_admin
from compass.db.mongo import get_db
from compass.schemas.audit import AuditListResponse
from compass.services.audit_service import AuditService

router = APIRouter(prefix="/admin/audit", tags=["Admin - Audit"])


@router.get("", response_model=AuditListResponse)
async def list_audit_logs(
    entity: Optional[str] = Query(None, description="provider | service | event"),
    admin: dict = Depends(get_current_admin),
    db=Depends(get_db),
):
    return {"logs": await AuditService.from_db(db).list_logs(entity)}
