"""
Tenant Use Cases
"""

from .dtos import SwitchTenantResponse
from .switch_tenant_use_case import SwitchTenantUseCase

__all__ = [
    "SwitchTenantResponse",
    "SwitchTenantUseCase",
]
