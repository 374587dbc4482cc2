"""
tasktracker.services._shared.ports
==================================

*Ports* (hexagonal interfaces) the service layer depends on for credential
handling. Concrete adapters live under :mod:`tasktracker.infra`.

- :mod:`token_provider`: :class:`~.TokenProvider` issues access/refresh
  tokens and validates access tokens.
- :mod:`password_hasher`: :class:`~.PasswordHasher` hashes and verifies
  passwords; the hash scheme is the adapter's business.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .token_provider import IssuedToken, TokenProvider, TokenSubject

__all__ = [
    "IssuedToken",
    "PasswordHasher",
    "TokenProvider",
    "TokenSubject",
]
