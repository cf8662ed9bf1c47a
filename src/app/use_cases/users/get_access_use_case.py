"""
Get Access Use Case

Evaluates every permission for the caller in one tenant.
"""

from typing import Optional, Tuple
from uuid import UUID

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import MembershipStatus, TenantMembership, UserProfile
from src.domain.policies import (
    Principal,
    RoleAccess,
    principal_for,
    resolve_active_tenant,
    resolve_context_for_tenant,
    workspace_access,
)
from .dtos import AccessResponse, WorkspaceFlags


async def load_principal(
    uow: UnitOfWork, user_id: UUID, tenant_id: Optional[UUID] = None
) -> Tuple[Principal, Optional[UserProfile], Optional[TenantMembership]]:
    """
    Principal for a user in a tenant. Without a tenant the resolved active
    tenant is used. Must be called inside an open unit of work.
    """
    profile = await uow.profiles.get_by_id(user_id)
    if profile is None:
        return Principal(), None, None

    memberships = await uow.memberships.get_by_user_id(user_id)
    active = [m for m in memberships if m.status == MembershipStatus.active]
    if tenant_id is not None:
        membership = next((m for m in active if m.tenant_id == tenant_id), None)
    else:
        membership = resolve_active_tenant(active, None, profile.default_tenant_id)

    return principal_for(profile, membership), profile, membership


class GetAccessUseCase:
    """
    Use case for the caller's permission map.

    Business Rules:
    - Denials are plain False entries, never errors
    - A tenant the caller has no active membership in yields tenant-level
      denials (platform roles still apply)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, tenant_id: Optional[UUID] = None
    ) -> Result[AccessResponse]:
        async with self.uow:
            principal, profile, membership = await load_principal(
                self.uow, user_id, tenant_id
            )

            access = RoleAccess(principal)
            flags = workspace_access(principal, bool(profile and profile.can_manage_help))
            context = None
            if membership is not None:
                context = resolve_context_for_tenant(membership, None, membership.default_context)

            return Return.ok(
                AccessResponse(
                    tenant_id=str(membership.tenant_id) if membership is not None else None,
                    role=membership.role.value if membership is not None else None,
                    active_context=context.value if context is not None else None,
                    is_platform_admin=access.is_platform_admin,
                    is_external_auditor=access.is_external_auditor,
                    workspace=WorkspaceFlags(
                        can_access_system_console=flags.can_access_system_console,
                        can_access_help_workstation=flags.can_access_help_workstation,
                        can_access_admin_module=flags.can_access_admin_module,
                        can_access_licensing_module=flags.can_access_licensing_module,
                    ),
                    permissions=access.permission_map(),
                )
            )
