"""Authentication service layer: token pair issuance, rotation and logout."""

from __future__ import annotations

from .dto import LoginIn, RefreshIn, RegisterIn, TokenPairOut
from .service import AuthService

__all__ = ["AuthService", "LoginIn", "RefreshIn", "RegisterIn", "TokenPairOut"]
