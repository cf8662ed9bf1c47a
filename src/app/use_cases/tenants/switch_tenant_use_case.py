"""
Switch Active Tenant Use Case

Moves the caller to another of their active tenants and resolves the portal
context there.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.audit_logger import AuditActions, ResourceTypes, build_audit_event
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import MembershipStatus
from src.domain.policies import resolve_context_for_tenant
from .dtos import SwitchTenantResponse


class SwitchTenantUseCase:
    """
    Use case for switching the active tenant.

    Business Rules:
    - Target must be one of the caller's active memberships
    - Context: stored preference for the target, then its default, then the
      context active before the switch, then the first allowed context
    - Target becomes the profile's default tenant for the next sign-in
    - Creates audit event
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        tenant_id: UUID,
        current_context: Optional[str] = None,
        stored_context: Optional[str] = None,
    ) -> Result[SwitchTenantResponse]:
        async with self.uow:
            profile = await self.uow.profiles.get_by_id(user_id)
            if profile is None:
                return Return.err(Error("PROFILE_NOT_FOUND", "Profile not found"))

            membership = await self.uow.memberships.get_by_user_and_tenant(user_id, tenant_id)
            if membership is None or membership.status != MembershipStatus.active:
                return Return.err(
                    Error("NOT_A_MEMBER", "No active membership in this tenant")
                )

            tenant = await self.uow.tenants.get_by_id(tenant_id)
            context = resolve_context_for_tenant(
                membership,
                stored_context=stored_context,
                default_context=membership.default_context,
                current_context=current_context,
            )

            profile.default_tenant_id = tenant_id
            await self.uow.profiles.update(profile)

            await self.uow.audit_events.create(
                build_audit_event(
                    AuditActions.TENANT_SWITCHED,
                    ResourceTypes.TENANT,
                    actor_id=user_id,
                    resource_id=tenant_id,
                    tenant_id=tenant_id,
                    details={"context": context.value if context else None},
                )
            )
            await self.uow.commit()

        return Return.ok(
            SwitchTenantResponse(
                tenant_id=str(tenant_id),
                tenant_name=tenant.legal_name if tenant is not None else None,
                role=membership.role.value,
                allowed_contexts=[c.value for c in membership.contexts()],
                active_context=context.value if context is not None else None,
            )
        )
