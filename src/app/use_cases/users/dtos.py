"""
User Use Case DTOs

Responses describing who the caller is and what they may do.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


class ProfileInfo(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = None
    platform_role: str
    status: str
    density: str
    default_tenant_id: Optional[str] = None
    default_context: Optional[str] = None
    last_login_at: Optional[datetime] = None


class MembershipInfo(BaseModel):
    tenant_id: str
    tenant_name: Optional[str] = None
    role: str
    status: str
    allowed_contexts: List[str]
    default_context: Optional[str] = None


class MeResponse(BaseModel):
    user_id: str
    access_state: str
    profile: Optional[ProfileInfo] = None
    memberships: List[MembershipInfo]
    active_tenant_id: Optional[str] = None
    active_context: Optional[str] = None


class WorkspaceFlags(BaseModel):
    can_access_system_console: bool
    can_access_help_workstation: bool
    can_access_admin_module: bool
    can_access_licensing_module: bool


class AccessResponse(BaseModel):
    tenant_id: Optional[str] = None
    role: Optional[str] = None
    active_context: Optional[str] = None
    is_platform_admin: bool
    is_external_auditor: bool
    workspace: WorkspaceFlags
    permissions: Dict[str, bool]
