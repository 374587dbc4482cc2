"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or any
transport. They are the stable contract between repositories, policies,
token adapters and application services.

Translation to RFC 7807 problem details happens in
``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError mentions the given constraint. SQLite only
        reports column names, so ``users.email`` style matches are accepted
        for ``uq_<table>_<column>`` constraints as well.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    if name.startswith("uq_"):
        table, _, column = name[3:].partition("_")
        return bool(column) and f"{table}.{column}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, policies or services.
    """

    pass


class ConfigurationError(RuntimeError):
    """
    Raised at startup when required settings are missing or invalid.

    Deliberately outside the :class:`ServiceError` tree: it is fatal and must
    abort application creation instead of being mapped to a response.
    """


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Team").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class ValidationError(ServiceError):
    """Raised when input values are rejected by the domain model."""


class UnauthorizedError(ServiceError):
    """
    Raised when credentials or tokens cannot be accepted.

    The message is intentionally generic so callers cannot tell which check
    failed (unknown user, wrong password, bad signature, stale refresh token).
    """

    GENERIC_MESSAGE = "Invalid credentials or token."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.GENERIC_MESSAGE)


class AuthorizationError(ServiceError):
    """
    Raised when an authorization rule denies the requested operation.

    :param reason: Machine-readable denial reason.
    :type reason: Enum | None
    :param message: Optional human-readable message.
    :type message: str | None
    """

    def __init__(self, reason: Enum | None = None, message: str | None = None) -> None:
        self.reason = reason
        text = message or (f"Operation not permitted: {reason.value}" if reason else None)
        super().__init__(text or "Operation not permitted.")


@dataclass(slots=True)
class OperationTimeoutError(ServiceError):
    """
    Raised when a caller-supplied deadline expires or the call is cancelled.

    :param stage: Name of the stage at which the deadline was observed.
    :type stage: str
    """

    stage: str

    def __str__(self) -> str:
        return f"Operation deadline exceeded at stage: {self.stage}"


# --------------------------------------------------------------------------- #
# Token validation errors (internal to the auth boundary)
# --------------------------------------------------------------------------- #


class TokenError(Exception):
    """Base class for access-token validation failures."""


class InvalidSignatureError(TokenError):
    """The token signature does not verify under the configured key."""


class InvalidIssuerOrAudienceError(TokenError):
    """The ``iss`` or ``aud`` claim does not match configuration."""


class TokenExpiredError(TokenError):
    """The token lifetime has elapsed (only raised when expiry is checked)."""


class MalformedTokenError(TokenError):
    """The token is not decodable, lacks required claims or uses another algorithm."""
