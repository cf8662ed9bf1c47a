"""
Authority Service Domain Enums

Closed enumeration types used across domain entities and policies.
"""

from enum import Enum


class PlatformRole(str, Enum):
    """System-wide role, independent of any tenant"""

    platform_admin = "platform_admin"
    platform_user = "platform_user"
    external_auditor = "external_auditor"


class ProfileStatus(str, Enum):
    """Profile status (soft lifecycle, never deleted)"""

    active = "active"
    suspended = "suspended"
    revoked = "revoked"


class DensityPreference(str, Enum):
    comfortable = "comfortable"
    compact = "compact"


class MembershipRole(str, Enum):
    """User role within a tenant, highest tier first"""

    tenant_admin = "tenant_admin"
    tenant_user = "tenant_user"
    viewer = "viewer"


class MembershipStatus(str, Enum):
    """Membership status"""

    active = "active"
    pending = "pending"
    suspended = "suspended"
    invited = "invited"
    denied = "denied"


class PortalContext(str, Enum):
    """Product area a membership can operate in"""

    licensing = "licensing"
    publishing = "publishing"


class AccessState(str, Enum):
    """Which surface an authenticated principal lands on"""

    loading = "loading"
    unauthenticated = "unauthenticated"
    no_profile = "no-profile"
    suspended_profile = "suspended-profile"
    no_access_request = "no-access-request"
    pending_approval = "pending-approval"
    suspended_access = "suspended-access"
    active = "active"


class NotificationType(str, Enum):
    authority_change_proposal = "authority_change_proposal"
    licensing_request = "licensing_request"
    payment_failure = "payment_failure"
    refund_initiated = "refund_initiated"
    approval_timeout = "approval_timeout"
    security_event = "security_event"
    export_completed = "export_completed"
    membership_change = "membership_change"


class NotificationPriority(str, Enum):
    low = "low"
    normal = "normal"
    high = "high"
    critical = "critical"


class ResolutionType(str, Enum):
    """How the underlying event of a notification was resolved"""

    approved = "approved"
    rejected = "rejected"
    completed = "completed"
    cancelled = "cancelled"
    expired = "expired"


class RetentionCategory(str, Enum):
    """Critical categories are retained permanently for audit"""

    standard = "standard"
    critical_authority = "critical_authority"
    critical_financial = "critical_financial"
    critical_security = "critical_security"


class EscalationStatus(str, Enum):
    pending = "pending"
    escalated = "escalated"
    resolved = "resolved"
    expired = "expired"


class TokenKind(str, Enum):
    """What a spent-token record blocks"""

    magic_link = "magic_link"
    access_token = "access_token"
