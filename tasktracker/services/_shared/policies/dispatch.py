"""Single entry point mapping an operation kind to its rule(s)."""

from __future__ import annotations

import logging

from .decisions import Decision, Operation
from .snapshots import TaskSnapshot, TeamSnapshot
from .tasks import (
    can_assign_task,
    can_mutate_task,
    can_unassign_task,
    validate_team_scoped_assignment,
)
from .teams import (
    can_add_member,
    can_leave_team,
    can_manage_team,
    can_remove_member,
    can_view_team,
)

logger = logging.getLogger(__name__)

_TASK_OPERATIONS = frozenset({Operation.MUTATE_TASK, Operation.ASSIGN_TASK, Operation.UNASSIGN_TASK})
_TARGETED_OPERATIONS = frozenset({Operation.ADD_MEMBER, Operation.REMOVE_MEMBER})


def authorize(
    operation: Operation,
    caller_id: str,
    snapshot: TaskSnapshot | TeamSnapshot,
    *,
    target_id: str | None = None,
) -> Decision:
    """
    Evaluate the rule(s) guarding ``operation`` for ``caller_id``.

    :param operation: Operation kind.
    :type operation: Operation
    :param caller_id: Identity id taken from verified claims.
    :type caller_id: str
    :param snapshot: Task snapshot for task operations, team snapshot otherwise.
    :type snapshot: TaskSnapshot | TeamSnapshot
    :param target_id: Assignee for ``ASSIGN_TASK`` (optional), member id for
        ``ADD_MEMBER`` / ``REMOVE_MEMBER`` (required).
    :type target_id: str | None
    :returns: The decision; never raises for a denial.
    :rtype: Decision
    :raises TypeError: If the snapshot kind does not match the operation.
    :raises ValueError: If a required ``target_id`` is missing.
    """
    if operation in _TASK_OPERATIONS:
        if not isinstance(snapshot, TaskSnapshot):
            raise TypeError(f"{operation.value} requires a TaskSnapshot")
    elif not isinstance(snapshot, TeamSnapshot):
        raise TypeError(f"{operation.value} requires a TeamSnapshot")
    if operation in _TARGETED_OPERATIONS and target_id is None:
        raise ValueError(f"{operation.value} requires target_id")

    decision = _evaluate(operation, caller_id, snapshot, target_id)
    if not decision:
        logger.info(
            "Authorization denied",
            extra={
                "operation": operation.value,
                "caller_id": caller_id,
                "resource_id": snapshot.id,
                "reason": decision.reason.value if decision.reason else None,
            },
        )
    return decision


def _evaluate(operation, caller_id, snapshot, target_id) -> Decision:
    if operation is Operation.MUTATE_TASK:
        return can_mutate_task(caller_id, snapshot)

    if operation is Operation.ASSIGN_TASK:
        decision = can_assign_task(caller_id, snapshot)
        if decision and target_id is not None:
            return validate_team_scoped_assignment(snapshot.team, target_id)
        return decision

    if operation is Operation.UNASSIGN_TASK:
        return can_unassign_task(caller_id, snapshot)

    if operation is Operation.ADD_MEMBER:
        decision = can_manage_team(caller_id, snapshot)
        return can_add_member(snapshot, target_id) if decision else decision

    if operation is Operation.REMOVE_MEMBER:
        if caller_id == target_id and not snapshot.is_owner(caller_id):
            return can_leave_team(caller_id, snapshot)
        decision = can_manage_team(caller_id, snapshot)
        return can_remove_member(snapshot, target_id) if decision else decision

    if operation is Operation.MANAGE_TEAM:
        return can_manage_team(caller_id, snapshot)

    if operation is Operation.VIEW_TEAM:
        return can_view_team(caller_id, snapshot)

    raise ValueError(f"Unsupported operation: {operation!r}")
