"""
Identity / Session Store

Holds the signed-in user, their profile and memberships, and the active
tenant/context selection for one client session. Constructed explicitly and
passed to whatever needs it; there is no module-level instance.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Set
from uuid import UUID

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.audit_logger import AuditActions, AuditLogger, ResourceTypes
from src.app.services.identity_provider import (
    AuthChangeEvent,
    IdentityProviderError,
    IdentitySession,
    IIdentityProvider,
)
from src.app.services.local_store import ILocalStore
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    AccessState,
    MembershipStatus,
    PortalContext,
    TenantMembership,
    UserProfile,
)
from src.domain.policies import (
    ActiveSelectionStore,
    RoleAccess,
    derive_access_state,
    principal_for,
    workspace_access,
)

logger = logging.getLogger(__name__)

AUTH_FAILED = Error("AUTH_FAILED", "Unable to sign in, try again")


def _detached(entity):
    """Plain copy of a loaded row; the unit of work expires its rows on exit"""
    return type(entity)(**entity.model_dump())


class SessionStore:
    def __init__(
        self,
        provider: IIdentityProvider,
        uow_factory: Callable[[], UnitOfWork],
        local_store: ILocalStore,
        audit_logger: Optional[AuditLogger] = None,
        active_tenant_key: str = ApplicationConfig.ACTIVE_TENANT_KEY,
        context_by_tenant_key: str = ApplicationConfig.CONTEXT_BY_TENANT_KEY,
    ):
        self.provider = provider
        self.uow_factory = uow_factory
        self.audit_logger = audit_logger
        self.selection = ActiveSelectionStore(
            local_store, active_tenant_key, context_by_tenant_key
        )

        self.session: Optional[IdentitySession] = None
        self.user_id: Optional[UUID] = None
        self.profile: Optional[UserProfile] = None
        self.all_memberships: List[TenantMembership] = []
        self.tenant_memberships: List[TenantMembership] = []
        self.active_tenant: Optional[TenantMembership] = None
        self.active_context: Optional[PortalContext] = None
        self.loading = True

        # Bumped on every load and sign-out; completions from an older
        # generation are discarded
        self._generation = 0
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        self._unsubscribe = self.provider.on_auth_state_change(self._on_auth_change)
        try:
            session = await self.provider.get_session()
        except IdentityProviderError:
            logger.warning("Could not read current session", exc_info=True)
            session = None
        await self._apply_session(session)

    def teardown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    def _on_auth_change(
        self, event: AuthChangeEvent, session: Optional[IdentitySession]
    ) -> None:
        if event == AuthChangeEvent.token_refreshed and session is not None:
            if self.user_id == session.user_id:
                self.session = session
                return
        task = asyncio.ensure_future(self._apply_session(session))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _apply_session(self, session: Optional[IdentitySession]) -> None:
        self.session = session
        if session is None:
            self._clear_identity()
            self.loading = False
            return
        if session.user_id == self.user_id and self.profile is not None:
            return
        self.user_id = session.user_id
        await self.load_identity(session.user_id)

    # ------------------------------------------------------------------
    # Identity loading
    # ------------------------------------------------------------------

    async def _fetch_profile(self, user_id: UUID) -> Optional[UserProfile]:
        try:
            async with self.uow_factory() as uow:
                profile = await uow.profiles.get_by_id(user_id)
                return _detached(profile) if profile is not None else None
        except Exception:
            logger.warning("Profile fetch failed for %s", user_id, exc_info=True)
            return None

    async def _fetch_memberships(self, user_id: UUID) -> List[TenantMembership]:
        try:
            async with self.uow_factory() as uow:
                memberships = await uow.memberships.get_by_user_id(user_id)
                return [_detached(m) for m in memberships]
        except Exception:
            logger.warning("Membership fetch failed for %s", user_id, exc_info=True)
            return []

    async def load_identity(self, user_id: UUID) -> bool:
        """
        Fetch profile and memberships concurrently and apply them together.

        Returns False when the result arrived for a superseded load.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True

        profile, memberships = await asyncio.gather(
            self._fetch_profile(user_id), self._fetch_memberships(user_id)
        )

        if generation != self._generation or self.user_id != user_id:
            logger.debug("Discarding stale identity load for %s", user_id)
            return False

        self.profile = profile
        self.all_memberships = list(memberships)
        self.tenant_memberships = [
            m for m in self.all_memberships if m.status == MembershipStatus.active
        ]
        self._resolve_selection()
        self.loading = False
        return True

    def _resolve_selection(self) -> None:
        default_tenant_id = self.profile.default_tenant_id if self.profile else None
        tenant = self.selection.resolve_tenant(self.tenant_memberships, default_tenant_id)
        self.active_tenant = tenant
        if tenant is None:
            self.active_context = None
            return
        self.selection.set_active_tenant(tenant.tenant_id)
        self.active_context = self.selection.resolve_context(tenant)

    def _clear_identity(self) -> None:
        self.user_id = None
        self.profile = None
        self.all_memberships = []
        self.tenant_memberships = []
        self.active_tenant = None
        self.active_context = None

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def access_state(self) -> AccessState:
        return derive_access_state(
            self.loading, self.user_id, self.profile, self.all_memberships
        )

    def role_access(self) -> RoleAccess:
        return RoleAccess(principal_for(self.profile, self.active_tenant))

    def workspace_access(self):
        can_manage_help = bool(self.profile and self.profile.can_manage_help)
        return workspace_access(
            principal_for(self.profile, self.active_tenant), can_manage_help
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    async def switch_tenant(self, tenant_id: UUID) -> bool:
        target = next(
            (m for m in self.tenant_memberships if str(m.tenant_id) == str(tenant_id)),
            None,
        )
        if target is None:
            return False

        self.selection.set_active_tenant(target.tenant_id)
        self.active_tenant = target
        self.active_context = self.selection.resolve_context(
            target, current_context=self.active_context
        )

        if self.audit_logger is not None:
            await self.audit_logger.emit(
                AuditActions.TENANT_SWITCHED,
                ResourceTypes.TENANT,
                actor_id=self.user_id,
                resource_id=target.tenant_id,
                tenant_id=target.tenant_id,
            )
        return True

    def set_active_context(self, context: PortalContext) -> bool:
        if self.active_tenant is None:
            return False
        try:
            context = PortalContext(context)
        except ValueError:
            return False
        if context not in self.active_tenant.contexts():
            return False
        self.selection.remember_context(self.active_tenant.tenant_id, context)
        self.active_context = context
        return True

    # ------------------------------------------------------------------
    # Sign-in / sign-out
    # ------------------------------------------------------------------

    async def sign_in_with_magic_link(
        self, email: str, redirect_to: Optional[str] = None
    ) -> Result[None]:
        try:
            await self.provider.sign_in_with_otp(email, redirect_to)
        except IdentityProviderError:
            logger.warning("Magic link request failed", exc_info=True)
            return Return.err(AUTH_FAILED)
        return Return.ok()

    async def complete_sign_in(self, token: str) -> Result[IdentitySession]:
        try:
            session = await self.provider.verify_otp(token)
        except IdentityProviderError:
            logger.warning("Magic link redemption failed", exc_info=True)
            return Return.err(AUTH_FAILED)
        await self._apply_session(session)
        return Return.ok(session)

    async def sign_out(self) -> None:
        """Provider sign-out, then local cleanup whether or not it succeeded."""
        self._generation += 1
        try:
            await self.provider.sign_out()
        except Exception:
            logger.error("Provider sign-out failed; clearing local session", exc_info=True)

        self.session = None
        self._clear_identity()
        self.selection.clear_active_tenant()
        self.loading = False
