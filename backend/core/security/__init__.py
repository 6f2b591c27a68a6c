"""
Security utilities for authentication and authorization.
"""

from .password import PasswordHasher
from .tokens import TokenPayload, TokenService

__all__ = [
    "PasswordHasher",
    "TokenService",
    "TokenPayload",
]
