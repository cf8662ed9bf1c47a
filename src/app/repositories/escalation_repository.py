from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import (
    EscalationEvent,
    EscalationRule,
    EscalationStatus,
    NotificationPriority,
    NotificationType,
)


class IEscalationRuleRepository(ABC):
    """EscalationRule repository interface - application layer"""

    @abstractmethod
    async def list_all(self) -> List[EscalationRule]:
        """Every rule, active or not"""
        pass

    @abstractmethod
    async def list_active(self) -> List[EscalationRule]:
        """Rules that may fire"""
        pass

    @abstractmethod
    async def get_by_scope(
        self,
        notification_type: NotificationType,
        priority: NotificationPriority,
        tenant_id: Optional[UUID],
    ) -> Optional[EscalationRule]:
        """Get the rule for a (type, priority, tenant) scope"""
        pass

    @abstractmethod
    async def save(self, rule: EscalationRule) -> EscalationRule:
        """Create or update a rule"""
        pass


class IEscalationEventRepository(ABC):
    """EscalationEvent repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, event_id: UUID) -> Optional[EscalationEvent]:
        """Get escalation event by ID"""
        pass

    @abstractmethod
    async def get_by_notification_ids(
        self, notification_ids: List[UUID]
    ) -> List[EscalationEvent]:
        """Events already recorded for a set of notifications"""
        pass

    @abstractmethod
    async def list_events(
        self, status: Optional[EscalationStatus] = None, limit: int = 50
    ) -> List[EscalationEvent]:
        """Escalation events, newest first"""
        pass

    @abstractmethod
    async def create(self, event: EscalationEvent) -> EscalationEvent:
        """Record an escalation"""
        pass

    @abstractmethod
    async def update(self, event: EscalationEvent) -> EscalationEvent:
        """Persist the single resolution of an event"""
        pass
