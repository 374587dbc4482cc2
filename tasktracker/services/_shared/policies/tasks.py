"""Task authorization rules.

All rules are pure functions of the caller id and a :class:`TaskSnapshot`;
they never touch the store.
"""

from __future__ import annotations

from .common import has_team_access
from .decisions import ALLOW, Decision, DenialReason
from .snapshots import TaskSnapshot, TeamSnapshot


def can_mutate_task(caller_id: str, task: TaskSnapshot) -> Decision:
    """Creator, current assignee, or any owner/member of the task's team."""
    if caller_id == task.creator_id:
        return ALLOW
    if task.assignee_id is not None and caller_id == task.assignee_id:
        return ALLOW
    if has_team_access(caller_id, task.team):
        return ALLOW
    return Decision.deny(DenialReason.NOT_TASK_PARTICIPANT)


def can_assign_task(caller_id: str, task: TaskSnapshot) -> Decision:
    """Creator, or any owner/member of the task's team. The assignee alone may not reassign."""
    if caller_id == task.creator_id or has_team_access(caller_id, task.team):
        return ALLOW
    return Decision.deny(DenialReason.NOT_CREATOR_OR_TEAM_MEMBER)


def can_unassign_task(caller_id: str, task: TaskSnapshot) -> Decision:
    """Creator, current assignee, or any owner/member of the task's team."""
    return can_mutate_task(caller_id, task)


def validate_team_scoped_assignment(team: TeamSnapshot | None, candidate_id: str) -> Decision:
    """A team-scoped task may only be assigned to that team's owner or members.

    Tasks without a team accept any assignee.
    """
    if team is None or team.has_access(candidate_id):
        return ALLOW
    return Decision.deny(DenialReason.ASSIGNEE_NOT_IN_TEAM)


def validate_team_scoped_creation(team: TeamSnapshot | None, creator_id: str) -> Decision:
    """The creator of a team-scoped task must be that team's owner or a member."""
    if team is None or team.has_access(creator_id):
        return ALLOW
    return Decision.deny(DenialReason.CREATOR_NOT_IN_TEAM)
