from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import TenantMembership


class IMembershipRepository(ABC):
    """TenantMembership repository interface - application layer"""

    @abstractmethod
    async def get_by_user_and_tenant(
        self, user_id: UUID, tenant_id: UUID
    ) -> Optional[TenantMembership]:
        """Get membership by user and tenant"""
        pass

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> List[TenantMembership]:
        """Get every membership of a user, in creation order"""
        pass

    @abstractmethod
    async def create(self, membership: TenantMembership) -> TenantMembership:
        """Create a new membership"""
        pass
