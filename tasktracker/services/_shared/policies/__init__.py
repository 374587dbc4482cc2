"""Pure authorization rules for teams and tasks."""

from __future__ import annotations

from .common import has_team_access
from .decisions import ALLOW, Decision, DenialReason, Operation
from .dispatch import authorize
from .snapshots import TaskSnapshot, TeamSnapshot
from .tasks import (
    can_assign_task,
    can_mutate_task,
    can_unassign_task,
    validate_team_scoped_assignment,
    validate_team_scoped_creation,
)
from .teams import (
    can_add_member,
    can_leave_team,
    can_manage_team,
    can_remove_member,
    can_view_team,
)

__all__ = [
    "ALLOW",
    "Decision",
    "DenialReason",
    "Operation",
    "TaskSnapshot",
    "TeamSnapshot",
    "authorize",
    "can_add_member",
    "can_assign_task",
    "can_leave_team",
    "can_manage_team",
    "can_mutate_task",
    "can_remove_member",
    "can_unassign_task",
    "can_view_team",
    "has_team_access",
    "validate_team_scoped_assignment",
    "validate_team_scoped_creation",
]
