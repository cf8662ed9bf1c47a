from typing import List, Optional

from pydantic import BaseModel


class SwitchTenantResponse(BaseModel):
    tenant_id: str
    tenant_name: Optional[str] = None
    role: str
    allowed_contexts: List[str]
    active_context: Optional[str] = None
