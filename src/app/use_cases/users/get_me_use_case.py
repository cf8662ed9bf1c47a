"""
Get Me Use Case

Loads the caller's profile, memberships and landing access state.
"""

from typing import Optional
from uuid import UUID

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import MembershipStatus
from src.domain.policies import (
    derive_access_state,
    resolve_active_tenant,
    resolve_context_for_tenant,
)
from .dtos import MeResponse, MembershipInfo, ProfileInfo


def profile_info(profile) -> ProfileInfo:
    return ProfileInfo(
        id=str(profile.id),
        email=profile.email,
        display_name=profile.display_name,
        platform_role=profile.platform_role.value,
        status=profile.status.value,
        density=profile.density.value,
        default_tenant_id=str(profile.default_tenant_id) if profile.default_tenant_id else None,
        default_context=profile.default_context.value if profile.default_context else None,
        last_login_at=profile.last_login_at,
    )


class GetMeUseCase:
    """
    Use case for loading the caller's identity.

    Business Rules:
    - A missing profile is not an error: access state is no-profile
    - Every membership is listed; only active ones take part in tenant
      resolution
    - Stored selection, if the client sends it, is honoured when still valid
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        stored_tenant_id: Optional[str] = None,
        stored_context: Optional[str] = None,
    ) -> Result[MeResponse]:
        async with self.uow:
            profile = await self.uow.profiles.get_by_id(user_id)
            memberships = await self.uow.memberships.get_by_user_id(user_id)
            tenants = await self.uow.tenants.get_by_ids([m.tenant_id for m in memberships])

            names = {t.id: t.legal_name for t in tenants}
            active = [m for m in memberships if m.status == MembershipStatus.active]

            access_state = derive_access_state(False, user_id, profile, memberships)
            tenant = None
            context = None
            if profile is not None:
                tenant = resolve_active_tenant(active, stored_tenant_id, profile.default_tenant_id)
                if tenant is not None:
                    context = resolve_context_for_tenant(
                        tenant, stored_context, tenant.default_context
                    )

            return Return.ok(
                MeResponse(
                    user_id=str(user_id),
                    access_state=access_state.value,
                    profile=profile_info(profile) if profile is not None else None,
                    memberships=[
                        MembershipInfo(
                            tenant_id=str(m.tenant_id),
                            tenant_name=names.get(m.tenant_id),
                            role=m.role.value,
                            status=m.status.value,
                            allowed_contexts=[c.value for c in m.contexts()],
                            default_context=m.default_context.value if m.default_context else None,
                        )
                        for m in memberships
                    ],
                    active_tenant_id=str(tenant.tenant_id) if tenant is not None else None,
                    active_context=context.value if context is not None else None,
                )
            )
