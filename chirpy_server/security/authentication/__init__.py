"""
Authentication module - JWT and credential management

Provides:
- JWTHandler: Session token issuing and validation (HS256)
- AccountManager: Account credentials (bcrypt)
"""

from .jwt_handler import (
    JWTHandler,
    TokenPair,
    UnauthorizedError,
    WrongTokenKindError,
    MalformedTokenError,
    TokenRevokedError,
)
from .account_manager import AccountManager, AuthFailedError

__all__ = [
    "JWTHandler",
    "TokenPair",
    "UnauthorizedError",
    "WrongTokenKindError",
    "MalformedTokenError",
    "TokenRevokedError",
    "AccountManager",
    "AuthFailedError",
]
