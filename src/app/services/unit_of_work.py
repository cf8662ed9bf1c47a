from abc import ABC, abstractmethod

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.escalation_repository import (
    IEscalationEventRepository,
    IEscalationRuleRepository,
)
from src.app.repositories.membership_repository import IMembershipRepository
from src.app.repositories.notification_repository import INotificationRepository
from src.app.repositories.profile_repository import IProfileRepository
from src.app.repositories.tenant_repository import ITenantRepository
from src.app.repositories.token_record_repository import ITokenRecordRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    profiles: IProfileRepository
    tenants: ITenantRepository
    memberships: IMembershipRepository
    notifications: INotificationRepository
    escalation_rules: IEscalationRuleRepository
    escalation_events: IEscalationEventRepository
    audit_events: IAuditEventRepository
    token_records: ITokenRecordRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
