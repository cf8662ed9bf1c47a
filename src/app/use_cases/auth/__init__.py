"""
Authentication Use Cases

Passwordless sign-in and sign-out.
"""

from .complete_sign_in_use_case import CompleteSignInUseCase
from .dtos import MagicLinkResponse, SignInResponse, SignOutResponse
from .sign_out_use_case import SignOutUseCase
from .start_sign_in_use_case import StartSignInUseCase

__all__ = [
    "CompleteSignInUseCase",
    "MagicLinkResponse",
    "SignInResponse",
    "SignOutResponse",
    "SignOutUseCase",
    "StartSignInUseCase",
]
