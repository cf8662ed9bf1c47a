"""
Tenant & Portal Context Resolution

Deterministic selection of the active tenant membership and active portal
context. The pure functions here take every input explicitly;
``ActiveSelectionStore`` adds the persisted preferences and is the only
writer of them.
"""

import json
import logging
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from src.domain.entities import PortalContext, TenantMembership

logger = logging.getLogger(__name__)


def resolve_active_tenant(
    memberships: Sequence[TenantMembership],
    stored_tenant_id: Optional[str],
    default_tenant_id: Optional[UUID] = None,
) -> Optional[TenantMembership]:
    """
    Pick the active tenant membership.

    Priority: stored tenant (if still in the active set), the profile's
    default tenant, the first membership, otherwise None.
    """
    if not memberships:
        return None

    if stored_tenant_id:
        for membership in memberships:
            if str(membership.tenant_id) == str(stored_tenant_id):
                return membership

    if default_tenant_id is not None:
        for membership in memberships:
            if membership.tenant_id == default_tenant_id:
                return membership

    return memberships[0]


def resolve_context_for_tenant(
    tenant: TenantMembership,
    stored_context: Optional[str] = None,
    default_context: Optional[str] = None,
    current_context: Optional[str] = None,
) -> Optional[PortalContext]:
    """
    Pick the portal context for a tenant membership, first match wins:

    1. exactly one allowed context
    2. stored per-tenant preference, if still allowed
    3. membership default context, if allowed
    4. the context active before a tenant switch, if allowed
    5. first allowed context
    """
    if default_context is None:
        default_context = tenant.default_context

    available = tenant.contexts()
    if not available:
        return None

    if len(available) == 1:
        return available[0]

    for candidate in (stored_context, default_context, current_context):
        if candidate is None:
            continue
        try:
            context = PortalContext(candidate)
        except ValueError:
            continue
        if context in available:
            return context

    return available[0]


class ActiveSelectionStore:
    """
    Owner of the persisted active-tenant id and per-tenant context map.

    Other components read the selection through the session store and must
    not write these keys directly.
    """

    def __init__(self, local_store, active_tenant_key: str, context_by_tenant_key: str):
        self.local_store = local_store
        self.active_tenant_key = active_tenant_key
        self.context_by_tenant_key = context_by_tenant_key

    def stored_tenant_id(self) -> Optional[str]:
        return self.local_store.get(self.active_tenant_key)

    def _context_map(self) -> Dict[str, str]:
        raw = self.local_store.get(self.context_by_tenant_key)
        if not raw:
            return {}
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            logger.debug("Ignoring unreadable context preference map")
            return {}
        return value if isinstance(value, dict) else {}

    def stored_context_for(self, tenant_id) -> Optional[str]:
        return self._context_map().get(str(tenant_id))

    def remember_context(self, tenant_id, context: PortalContext) -> None:
        mapping = self._context_map()
        mapping[str(tenant_id)] = PortalContext(context).value
        self.local_store.set(self.context_by_tenant_key, json.dumps(mapping))

    def set_active_tenant(self, tenant_id) -> None:
        self.local_store.set(self.active_tenant_key, str(tenant_id))

    def resolve_tenant(
        self,
        memberships: List[TenantMembership],
        default_tenant_id: Optional[UUID] = None,
    ) -> Optional[TenantMembership]:
        return resolve_active_tenant(memberships, self.stored_tenant_id(), default_tenant_id)

    def resolve_context(
        self,
        tenant: TenantMembership,
        current_context: Optional[PortalContext] = None,
    ) -> Optional[PortalContext]:
        """Resolve the context for a tenant and persist it as the new preference."""
        context = resolve_context_for_tenant(
            tenant,
            stored_context=self.stored_context_for(tenant.tenant_id),
            default_context=tenant.default_context,
            current_context=current_context,
        )
        if context is not None:
            self.remember_context(tenant.tenant_id, context)
        return context

    def clear_active_tenant(self) -> None:
        """Forget the active tenant; per-tenant context preferences survive sign-out."""
        self.local_store.remove(self.active_tenant_key)
