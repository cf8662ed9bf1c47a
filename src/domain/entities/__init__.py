"""
Authority Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AccessState,
    DensityPreference,
    EscalationStatus,
    MembershipRole,
    MembershipStatus,
    NotificationPriority,
    NotificationType,
    PlatformRole,
    PortalContext,
    ProfileStatus,
    ResolutionType,
    RetentionCategory,
    TokenKind,
)

# Export all entities
from .tenant import Tenant
from .profile import UserProfile
from .membership import TenantMembership
from .notification import Notification
from .escalation import EscalationEvent, EscalationRule
from .audit_event import AuditEvent
from .token_record import TokenRecord

__all__ = [
    # Enums
    "AccessState",
    "DensityPreference",
    "EscalationStatus",
    "MembershipRole",
    "MembershipStatus",
    "NotificationPriority",
    "NotificationType",
    "PlatformRole",
    "PortalContext",
    "ProfileStatus",
    "ResolutionType",
    "RetentionCategory",
    "TokenKind",
    # Entities
    "Tenant",
    "UserProfile",
    "TenantMembership",
    "Notification",
    "EscalationRule",
    "EscalationEvent",
    "AuditEvent",
    "TokenRecord",
]
