"""
Authority Policies

Pure decision code: no I/O, no clocks. Callers pass ``now`` explicitly.
"""

from .access_state import derive_access_state
from .context_resolution import (
    ActiveSelectionStore,
    resolve_active_tenant,
    resolve_context_for_tenant,
)
from .permissions import (
    Permission,
    Principal,
    RoleAccess,
    has_all_permissions,
    has_any_permission,
    has_permission,
    principal_for,
    workspace_access,
)
from .session_timeout import (
    LogoutReason,
    SessionPolicy,
    SessionState,
    SessionTimeoutMachine,
    Transition,
)

__all__ = [
    "derive_access_state",
    "ActiveSelectionStore",
    "resolve_active_tenant",
    "resolve_context_for_tenant",
    "Permission",
    "Principal",
    "RoleAccess",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "principal_for",
    "workspace_access",
    "LogoutReason",
    "SessionPolicy",
    "SessionState",
    "SessionTimeoutMachine",
    "Transition",
]
