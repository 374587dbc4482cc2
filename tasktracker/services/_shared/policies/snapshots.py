"""Immutable read-models that policies evaluate.

Snapshots are built inside the Unit of Work from rows loaded (and locked) for
the current operation, so a decision and the write it guards see the same
state.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tasktracker.models.base import EntityStatus


@dataclass(frozen=True, slots=True)
class TeamSnapshot:
    """
    Team ownership and membership at a point in time.

    :param id: Team id.
    :type id: str
    :param owner_id: Owning identity id.
    :type owner_id: str
    :param member_ids: Ids of current members (owner not implied).
    :type member_ids: frozenset[str]
    :param name: Team name.
    :type name: str
    :param status: Lifecycle status.
    :type status: EntityStatus
    """

    id: str
    owner_id: str
    member_ids: frozenset[str] = field(default_factory=frozenset)
    name: str = ""
    status: EntityStatus = EntityStatus.ACTIVE

    def is_owner(self, user_id: str | None) -> bool:
        return user_id is not None and user_id == self.owner_id

    def is_member(self, user_id: str | None) -> bool:
        return user_id is not None and user_id in self.member_ids

    def has_access(self, user_id: str | None) -> bool:
        """Owner or member."""
        return self.is_owner(user_id) or self.is_member(user_id)


@dataclass(frozen=True, slots=True)
class TaskSnapshot:
    """
    Task participants at a point in time.

    :param id: Task id.
    :type id: str
    :param creator_id: Creating identity (immutable).
    :type creator_id: str
    :param assignee_id: Current assignee, if any.
    :type assignee_id: str | None
    :param team: Snapshot of the associated team, if any.
    :type team: TeamSnapshot | None
    :param status: Lifecycle status.
    :type status: EntityStatus
    """

    id: str
    creator_id: str
    assignee_id: str | None = None
    team: TeamSnapshot | None = None
    status: EntityStatus = EntityStatus.ACTIVE
