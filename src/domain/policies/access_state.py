"""
Access State

Which surface a principal lands on, derived from identity, profile and
membership state. Checks run in a fixed order; the first match wins.
"""

from typing import Optional, Sequence

from src.domain.entities import (
    AccessState,
    MembershipStatus,
    PlatformRole,
    ProfileStatus,
    TenantMembership,
    UserProfile,
)

_WAITING = frozenset({MembershipStatus.invited, MembershipStatus.pending})


def derive_access_state(
    loading: bool,
    user_id: Optional[object],
    profile: Optional[UserProfile],
    memberships: Sequence[TenantMembership],
) -> AccessState:
    if loading:
        return AccessState.loading
    if user_id is None:
        return AccessState.unauthenticated
    if profile is None:
        return AccessState.no_profile
    if profile.status != ProfileStatus.active:
        return AccessState.suspended_profile
    if profile.platform_role == PlatformRole.platform_admin:
        return AccessState.active
    if not memberships:
        return AccessState.no_access_request
    if any(m.status == MembershipStatus.active for m in memberships):
        return AccessState.active
    if any(m.status in _WAITING for m in memberships):
        return AccessState.pending_approval
    return AccessState.suspended_access
