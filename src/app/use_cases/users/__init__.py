"""
User Use Cases

Identity and access of the signed-in caller.
"""

from .dtos import AccessResponse, MeResponse, MembershipInfo, ProfileInfo
from .get_access_use_case import GetAccessUseCase, load_principal
from .get_me_use_case import GetMeUseCase

__all__ = [
    "AccessResponse",
    "GetAccessUseCase",
    "GetMeUseCase",
    "MeResponse",
    "MembershipInfo",
    "ProfileInfo",
    "load_principal",
]
