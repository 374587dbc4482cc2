"""Identity service layer: profile reads, updates and deactivation."""

from __future__ import annotations

from .dto import PasswordChangeIn, UserPublicOut, UserUpdateIn
from .service import IdentityService

__all__ = [
    "IdentityService",
    "PasswordChangeIn",
    "UserPublicOut",
    "UserUpdateIn",
]
