"""
Audit Use Cases

All audit-related business logic.
"""

from .dtos import AuditEventInfo, AuditEventPage, AuditWriteResponse
from .get_audit_events_use_case import GetAuditEventsUseCase
from .write_audit_event_use_case import WriteAuditEventUseCase

__all__ = [
    "AuditEventInfo",
    "AuditEventPage",
    "AuditWriteResponse",
    "GetAuditEventsUseCase",
    "WriteAuditEventUseCase",
]
