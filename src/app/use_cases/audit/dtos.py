from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class AuditEventInfo(BaseModel):
    id: str
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    actor_id: Optional[str] = None
    tenant_id: Optional[str] = None
    details: Dict[str, Any] = {}
    created_at: datetime


class AuditEventPage(BaseModel):
    events: List[AuditEventInfo]
    next_cursor: Optional[str] = None


class AuditWriteResponse(BaseModel):
    success: bool
    id: str
    created_at: datetime
