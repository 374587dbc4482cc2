"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts.
"""

from __future__ import annotations

from dataclasses import dataclass

from tasktracker.models.base import EntityStatus

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Input DTO for updating profile fields. ``None`` leaves a field untouched.

    :param first_name: Optional new first name.
    :type first_name: str | None
    :param last_name: Optional new last name.
    :type last_name: str | None
    :param email: Optional new login email.
    :type email: str | None
    """

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Input DTO for changing the caller's password.

    :param old_password: Current password.
    :type old_password: str
    :param new_password: New password (raw).
    :type new_password: str
    """

    old_password: str
    new_password: str


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe view of an identity (no credentials).

    :param id: Identity id.
    :type id: str
    :param email: Login email.
    :type email: str
    :param first_name: First name.
    :type first_name: str
    :param last_name: Last name.
    :type last_name: str
    :param name: Display name.
    :type name: str
    :param status: Lifecycle status.
    :type status: EntityStatus
    """

    id: str
    email: str
    first_name: str
    last_name: str
    name: str
    status: EntityStatus
