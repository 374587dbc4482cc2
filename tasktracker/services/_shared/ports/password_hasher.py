from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for producing and checking password verifiers."""

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, stored: str) -> bool: ...
