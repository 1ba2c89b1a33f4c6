"""Remote backend clients."""

from .base import (
    AuthEvent,
    AuthSession,
    AuthSessionProvider,
    UserDataRow,
    UserDataService,
)

__all__ = [
    "AuthEvent",
    "AuthSession",
    "AuthSessionProvider",
    "UserDataRow",
    "UserDataService",
]
