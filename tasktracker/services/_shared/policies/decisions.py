"""Authorization decision values returned by every policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tasktracker.services._shared.errors import AuthorizationError


class DenialReason(str, Enum):
    """Machine-readable reason attached to a denied decision."""

    NOT_TASK_PARTICIPANT = "not_task_participant"
    NOT_CREATOR_OR_TEAM_MEMBER = "not_creator_or_team_member"
    ASSIGNEE_NOT_IN_TEAM = "assignee_not_in_team"
    CREATOR_NOT_IN_TEAM = "creator_not_in_team"
    OWNER_NOT_REMOVABLE = "owner_not_removable"
    NOT_A_MEMBER = "not_a_member"
    ALREADY_MEMBER = "already_member"
    NOT_TEAM_OWNER = "not_team_owner"
    NOT_TEAM_PARTICIPANT = "not_team_participant"


class Operation(str, Enum):
    """Operations understood by :func:`~.dispatch.authorize`."""

    MUTATE_TASK = "mutate_task"
    ASSIGN_TASK = "assign_task"
    UNASSIGN_TASK = "unassign_task"
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    MANAGE_TEAM = "manage_team"
    VIEW_TEAM = "view_team"


@dataclass(frozen=True, slots=True)
class Decision:
    """
    Outcome of a policy evaluation.

    :param allowed: Whether the operation may proceed.
    :type allowed: bool
    :param reason: Why it was denied (``None`` when allowed).
    :type reason: DenialReason | None
    """

    allowed: bool
    reason: DenialReason | None = None

    @classmethod
    def allow(cls) -> Decision:
        return ALLOW

    @classmethod
    def deny(cls, reason: DenialReason) -> Decision:
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed

    def require(self, message: str | None = None) -> None:
        """
        Raise :class:`AuthorizationError` unless allowed.

        :param message: Optional human-readable message for the error.
        :type message: str | None
        :raises AuthorizationError: Carrying :attr:`reason`.
        """
        if not self.allowed:
            raise AuthorizationError(self.reason, message)


ALLOW = Decision(allowed=True)
