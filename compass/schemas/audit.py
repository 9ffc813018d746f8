from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from compass.models.common import CompassBaseModel


class AuditActor(CompassBaseModel):
    role: str  # provider | admin
    id: str
    email: Optional[str] = None


class AuditEntity(CompassBaseModel):
    type: str  # provider | service | event
    id: str
    email: Optional[str] = None


class AuditLogOut(CompassBaseModel):
    id: str
    time: datetime
    type: str

    actor: AuditActor
    entity: AuditEntity

    message: str
    meta: Dict[str, Any] = Field(default_factory=dict)


class AuditListResponse(CompassBaseModel):
    logs: List[AuditLogOut]
