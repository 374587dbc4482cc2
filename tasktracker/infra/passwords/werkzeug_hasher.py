from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from tasktracker.services._shared.ports import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """Password hasher delegating to :mod:`werkzeug.security` (scrypt by default).

    :param method: Werkzeug hash method string, e.g. ``"scrypt"`` or
        ``"pbkdf2:sha256:1000"`` for fast test fixtures.
    :type method: str
    """

    def __init__(self, method: str = "scrypt") -> None:
        self.method = method

    def hash(self, plaintext: str) -> str:
        if not plaintext:
            raise ValueError("Password is required.")
        return generate_password_hash(plaintext, method=self.method)

    def verify(self, plaintext: str, stored: str) -> bool:
        if not plaintext or not stored:
            return False
        return check_password_hash(stored, plaintext)
