"""
Permission Evaluator

Pure, side-effect-free resolution of "can this principal do X".

Role hierarchy:
- Platform administrator: every permission
- External auditor: read-only / audit-view permissions only
- Tenant admin > tenant user > viewer: tenant-scoped grants, optionally
  gated on the active tenant's allowed portal contexts

Denial is a plain ``False``: a denied surface is not rendered at all, so no
reason object is produced.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Union

from src.domain.entities.enums import (
    MembershipRole,
    PlatformRole,
    PortalContext,
    ProfileStatus,
)


class Permission(str, Enum):
    # Platform-level
    platform_admin = "platform:admin"
    platform_manage_users = "platform:manage_users"
    platform_manage_tenants = "platform:manage_tenants"
    platform_view_audit_logs = "platform:view_audit_logs"
    platform_manage_security = "platform:manage_security"
    # Tenant-level
    tenant_admin = "tenant:admin"
    tenant_manage_members = "tenant:manage_members"
    tenant_view_reports = "tenant:view_reports"
    # Context-level
    context_publishing = "context:publishing"
    context_licensing = "context:licensing"
    # Record-level
    records_create = "records:create"
    records_edit = "records:edit"
    records_delete = "records:delete"
    records_view = "records:view"
    records_export = "records:export"
    # Module-level
    module_admin = "module:admin"
    module_licensing = "module:licensing"
    module_publishing = "module:publishing"


@dataclass(frozen=True)
class PermissionRule:
    """Tenant roles granted a permission, and the context it is scoped to."""

    roles: FrozenSet[MembershipRole]
    context: Optional[PortalContext] = None
    read_only: bool = False


_ALL_TENANT_ROLES = frozenset(MembershipRole)
_WRITERS = frozenset({MembershipRole.tenant_admin, MembershipRole.tenant_user})
_ADMINS = frozenset({MembershipRole.tenant_admin})
_NOBODY: FrozenSet[MembershipRole] = frozenset()

POLICY_TABLE: Dict[Permission, PermissionRule] = {
    # Platform permissions are never granted through a tenant role
    Permission.platform_admin: PermissionRule(_NOBODY),
    Permission.platform_manage_users: PermissionRule(_NOBODY),
    Permission.platform_manage_tenants: PermissionRule(_NOBODY),
    Permission.platform_view_audit_logs: PermissionRule(_NOBODY, read_only=True),
    Permission.platform_manage_security: PermissionRule(_NOBODY),
    Permission.tenant_admin: PermissionRule(_ADMINS),
    Permission.tenant_manage_members: PermissionRule(_ADMINS),
    Permission.tenant_view_reports: PermissionRule(_WRITERS, read_only=True),
    Permission.context_publishing: PermissionRule(
        _ALL_TENANT_ROLES, context=PortalContext.publishing
    ),
    Permission.context_licensing: PermissionRule(
        _ALL_TENANT_ROLES, context=PortalContext.licensing
    ),
    Permission.records_create: PermissionRule(_WRITERS),
    Permission.records_edit: PermissionRule(_WRITERS),
    Permission.records_delete: PermissionRule(_WRITERS),
    Permission.records_view: PermissionRule(_ALL_TENANT_ROLES, read_only=True),
    Permission.records_export: PermissionRule(_ALL_TENANT_ROLES, read_only=True),
    Permission.module_admin: PermissionRule(_ADMINS),
    Permission.module_licensing: PermissionRule(
        _ALL_TENANT_ROLES, context=PortalContext.licensing
    ),
    Permission.module_publishing: PermissionRule(
        _ALL_TENANT_ROLES, context=PortalContext.publishing
    ),
}


def _check_policy_table() -> None:
    missing = [p.value for p in Permission if p not in POLICY_TABLE]
    if missing:
        raise RuntimeError(f"Permissions without a policy rule: {missing}")


_check_policy_table()

AUDIT_PERMISSIONS: FrozenSet[Permission] = frozenset(
    p for p, rule in POLICY_TABLE.items() if rule.read_only
)


@dataclass(frozen=True)
class Principal:
    """Role state a permission is evaluated against."""

    platform_role: Optional[PlatformRole] = None
    profile_status: Optional[ProfileStatus] = None
    membership_role: Optional[MembershipRole] = None
    allowed_contexts: FrozenSet[PortalContext] = field(default_factory=frozenset)

    @property
    def is_active(self) -> bool:
        return self.profile_status == ProfileStatus.active

    @property
    def is_platform_admin(self) -> bool:
        return self.is_active and self.platform_role == PlatformRole.platform_admin

    @property
    def is_external_auditor(self) -> bool:
        return self.is_active and self.platform_role == PlatformRole.external_auditor


def principal_for(profile, membership=None) -> Principal:
    """Build a Principal from a UserProfile and the active TenantMembership."""
    if profile is None:
        return Principal()
    return Principal(
        platform_role=profile.platform_role,
        profile_status=profile.status,
        membership_role=membership.role if membership is not None else None,
        allowed_contexts=frozenset(membership.contexts()) if membership is not None else frozenset(),
    )


def _as_permission(permission: Union[Permission, str]) -> Optional[Permission]:
    if isinstance(permission, Permission):
        return permission
    try:
        return Permission(permission)
    except ValueError:
        return None


def has_permission(principal: Principal, permission: Union[Permission, str]) -> bool:
    """Evaluate one permission. Unknown or unmapped permissions are denied."""
    if principal.is_platform_admin:
        return True

    resolved = _as_permission(permission)
    if resolved is None:
        return False

    rule = POLICY_TABLE.get(resolved)
    if rule is None:
        return False

    # Auditors never fall through to tenant rules
    if principal.is_external_auditor:
        return rule.read_only

    if not principal.is_active or principal.membership_role is None:
        return False

    if principal.membership_role not in rule.roles:
        return False

    if rule.context is not None:
        return rule.context in principal.allowed_contexts

    return True


def has_any_permission(
    principal: Principal, permissions: Iterable[Union[Permission, str]]
) -> bool:
    return any(has_permission(principal, p) for p in permissions)


def has_all_permissions(
    principal: Principal, permissions: Iterable[Union[Permission, str]]
) -> bool:
    return all(has_permission(principal, p) for p in permissions)


class RoleAccess:
    """
    Permission facade for one principal, the shape consumers gate surfaces on.

    ``should_render_surface`` and ``should_render_nav_item`` are the same
    boolean as ``has_permission``: a denied surface is omitted entirely.
    """

    def __init__(self, principal: Principal):
        self.principal = principal

    @property
    def is_platform_admin(self) -> bool:
        return self.principal.is_platform_admin

    @property
    def is_external_auditor(self) -> bool:
        return self.principal.is_external_auditor

    @property
    def is_tenant_admin(self) -> bool:
        return self.principal.membership_role == MembershipRole.tenant_admin

    @property
    def is_member(self) -> bool:
        return self.principal.membership_role == MembershipRole.tenant_user

    @property
    def is_viewer(self) -> bool:
        return self.principal.membership_role == MembershipRole.viewer

    @property
    def can_access_admin(self) -> bool:
        return self.principal.is_platform_admin

    def has_permission(self, permission: Union[Permission, str]) -> bool:
        return has_permission(self.principal, permission)

    def has_any_permission(self, permissions: Iterable[Union[Permission, str]]) -> bool:
        return has_any_permission(self.principal, permissions)

    def has_all_permissions(self, permissions: Iterable[Union[Permission, str]]) -> bool:
        return has_all_permissions(self.principal, permissions)

    def can_access_context(self, context: PortalContext) -> bool:
        return context in self.principal.allowed_contexts

    def should_render_surface(self, permission: Union[Permission, str]) -> bool:
        return self.has_permission(permission)

    def should_render_nav_item(self, permission: Union[Permission, str]) -> bool:
        return self.has_permission(permission)

    def permission_map(self) -> Dict[str, bool]:
        return {p.value: self.has_permission(p) for p in Permission}


@dataclass(frozen=True)
class WorkspaceAccess:
    """Which workstations a principal may open."""

    can_access_system_console: bool
    can_access_help_workstation: bool
    can_access_admin_module: bool
    can_access_licensing_module: bool


def workspace_access(principal: Principal, can_manage_help: bool = False) -> WorkspaceAccess:
    help_manager = (
        principal.is_active
        and principal.platform_role == PlatformRole.platform_user
        and can_manage_help
    )
    return WorkspaceAccess(
        can_access_system_console=principal.is_platform_admin,
        can_access_help_workstation=principal.is_platform_admin or help_manager,
        can_access_admin_module=has_permission(principal, Permission.module_admin),
        can_access_licensing_module=has_permission(principal, Permission.module_licensing),
    )
