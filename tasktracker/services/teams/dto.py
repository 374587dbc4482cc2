"""DTOs for TeamService."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from tasktracker.models.base import EntityStatus
from tasktracker.services.identity.dto import UserPublicOut

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TeamCreateIn:
    """
    Input DTO for creating a team owned by the caller.

    :param name: Team name (max 100 chars).
    :type name: str
    :param description: Optional free text.
    :type description: str | None
    :param member_ids: Initial member identity ids.
    :type member_ids: tuple[str, ...]
    """

    name: str
    description: str | None = None
    member_ids: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class TeamUpdateIn:
    """
    Input DTO for updating a team. ``None`` leaves a field untouched.

    :param name: New name.
    :type name: str | None
    :param description: New description.
    :type description: str | None
    :param owner_id: Transfer ownership to this identity.
    :type owner_id: str | None
    :param member_ids: Replace the whole member set.
    :type member_ids: tuple[str, ...] | None
    """

    name: str | None = None
    description: str | None = None
    owner_id: str | None = None
    member_ids: tuple[str, ...] | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TeamOut:
    id: str
    name: str
    description: str | None
    owner: UserPublicOut
    members: tuple[UserPublicOut, ...]
    status: EntityStatus
    created_at: datetime
    updated_at: datetime
