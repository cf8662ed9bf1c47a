from uuid import uuid4

import pytest

from src.domain.entities import (
    MembershipRole,
    MembershipStatus,
    PlatformRole,
    PortalContext,
    ProfileStatus,
    TenantMembership,
    UserProfile,
)
from src.domain.policies import (
    Permission,
    Principal,
    RoleAccess,
    has_all_permissions,
    has_any_permission,
    has_permission,
    principal_for,
    workspace_access,
)
from src.domain.policies.permissions import AUDIT_PERMISSIONS, POLICY_TABLE


def member(role: MembershipRole, contexts=("licensing",)) -> Principal:
    return Principal(
        platform_role=PlatformRole.platform_user,
        profile_status=ProfileStatus.active,
        membership_role=role,
        allowed_contexts=frozenset(PortalContext(c) for c in contexts),
    )


def test_every_permission_has_a_policy_rule():
    assert set(POLICY_TABLE) == set(Permission)


def test_platform_admin_has_every_permission():
    admin = Principal(platform_role=PlatformRole.platform_admin, profile_status=ProfileStatus.active)

    assert all(has_permission(admin, p) for p in Permission)


def test_suspended_platform_admin_has_no_permissions():
    admin = Principal(
        platform_role=PlatformRole.platform_admin,
        profile_status=ProfileStatus.suspended,
        membership_role=MembershipRole.tenant_admin,
        allowed_contexts=frozenset(PortalContext),
    )

    assert not any(has_permission(admin, p) for p in Permission)


def test_external_auditor_gets_read_only_permissions_only():
    """An auditor holding a tenant_admin membership still cannot write"""
    auditor = Principal(
        platform_role=PlatformRole.external_auditor,
        profile_status=ProfileStatus.active,
        membership_role=MembershipRole.tenant_admin,
        allowed_contexts=frozenset(PortalContext),
    )

    granted = {p for p in Permission if has_permission(auditor, p)}

    assert granted == set(AUDIT_PERMISSIONS)
    assert Permission.platform_view_audit_logs in granted
    assert Permission.records_export in granted
    assert Permission.tenant_admin not in granted
    assert Permission.records_create not in granted


def test_unknown_permission_is_denied():
    admin_member = member(MembershipRole.tenant_admin)

    assert has_permission(admin_member, "records:teleport") is False
    assert has_permission(Principal(), "") is False


def test_platform_user_without_membership_is_denied():
    user = Principal(platform_role=PlatformRole.platform_user, profile_status=ProfileStatus.active)

    assert not any(has_permission(user, p) for p in Permission)


@pytest.mark.parametrize(
    "role,permission,expected",
    [
        (MembershipRole.viewer, Permission.records_view, True),
        (MembershipRole.viewer, Permission.records_create, False),
        (MembershipRole.viewer, Permission.tenant_view_reports, False),
        (MembershipRole.tenant_user, Permission.records_create, True),
        (MembershipRole.tenant_user, Permission.tenant_admin, False),
        (MembershipRole.tenant_user, Permission.module_admin, False),
        (MembershipRole.tenant_admin, Permission.tenant_manage_members, True),
        (MembershipRole.tenant_admin, Permission.module_admin, True),
        (MembershipRole.tenant_admin, Permission.platform_manage_users, False),
    ],
)
def test_tenant_role_tiers(role, permission, expected):
    assert has_permission(member(role), permission) is expected


def test_context_permissions_follow_allowed_contexts():
    licensing_only = member(MembershipRole.tenant_admin, contexts=("licensing",))

    assert has_permission(licensing_only, Permission.context_licensing)
    assert has_permission(licensing_only, Permission.module_licensing)
    assert not has_permission(licensing_only, Permission.context_publishing)
    assert not has_permission(licensing_only, Permission.module_publishing)


def test_string_permissions_are_accepted():
    assert has_permission(member(MembershipRole.tenant_user), "records:edit")


def test_any_and_all():
    viewer = member(MembershipRole.viewer)

    assert has_any_permission(viewer, [Permission.records_create, Permission.records_view])
    assert not has_all_permissions(viewer, [Permission.records_create, Permission.records_view])
    assert has_all_permissions(viewer, [Permission.records_view, Permission.records_export])
    assert not has_any_permission(viewer, [])


def test_render_decisions_match_permission_checks():
    access = RoleAccess(member(MembershipRole.tenant_user))

    for permission in Permission:
        assert access.should_render_surface(permission) == access.has_permission(permission)
        assert access.should_render_nav_item(permission) == access.has_permission(permission)
    assert access.permission_map()["records:create"] is True
    assert access.is_member
    assert not access.can_access_admin


def test_principal_for_profile_and_membership():
    user_id = uuid4()
    profile = UserProfile(id=user_id, email="a@example.com", status=ProfileStatus.active)
    membership = TenantMembership(
        user_id=user_id,
        tenant_id=uuid4(),
        role=MembershipRole.viewer,
        status=MembershipStatus.active,
        allowed_contexts=["publishing", "licensing", "bogus"],
    )

    principal = principal_for(profile, membership)

    assert principal.membership_role == MembershipRole.viewer
    assert principal.allowed_contexts == frozenset(PortalContext)
    assert principal_for(None) == Principal()


def test_workspace_access():
    help_manager = Principal(platform_role=PlatformRole.platform_user, profile_status=ProfileStatus.active)
    admin = Principal(platform_role=PlatformRole.platform_admin, profile_status=ProfileStatus.active)

    assert workspace_access(help_manager, can_manage_help=True).can_access_help_workstation
    assert not workspace_access(help_manager).can_access_help_workstation
    assert not workspace_access(help_manager, can_manage_help=True).can_access_system_console

    admin_access = workspace_access(admin)
    assert admin_access.can_access_system_console
    assert admin_access.can_access_admin_module
    assert admin_access.can_access_licensing_module

    tenant_admin = workspace_access(member(MembershipRole.tenant_admin, contexts=("publishing",)))
    assert tenant_admin.can_access_admin_module
    assert not tenant_admin.can_access_licensing_module
