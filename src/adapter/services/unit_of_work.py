from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.audit_event_repository import AuditEventRepository
from src.adapter.repositories.escalation_repository import (
    EscalationEventRepository,
    EscalationRuleRepository,
)
from src.adapter.repositories.membership_repository import MembershipRepository
from src.adapter.repositories.notification_repository import NotificationRepository
from src.adapter.repositories.profile_repository import ProfileRepository
from src.adapter.repositories.tenant_repository import TenantRepository
from src.adapter.repositories.token_record_repository import TokenRecordRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession, close_on_exit: bool = False):
        self.session = session
        self.close_on_exit = close_on_exit

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.profiles = ProfileRepository(self.session)
        self.tenants = TenantRepository(self.session)
        self.memberships = MembershipRepository(self.session)
        self.notifications = NotificationRepository(self.session)
        self.escalation_rules = EscalationRuleRepository(self.session)
        self.escalation_events = EscalationEventRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        self.token_records = TokenRecordRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()
        if self.close_on_exit:
            await self.session.close()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
