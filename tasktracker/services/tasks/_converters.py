from __future__ import annotations

from tasktracker.models.task import Task
from tasktracker.services._shared.policies import TaskSnapshot
from tasktracker.services.teams._converters import team_to_snapshot

from .dto import TaskOut


def task_to_snapshot(row: Task) -> TaskSnapshot:
    """Freeze the participants of a loaded task (team included)."""
    return TaskSnapshot(
        id=row.id,
        creator_id=row.creator_id,
        assignee_id=row.assignee_id,
        team=team_to_snapshot(row.team) if row.team is not None else None,
        status=row.status,
    )


def task_to_out(row: Task) -> TaskOut:
    return TaskOut(
        id=row.id,
        title=row.title,
        description=row.description,
        priority=row.priority,
        due_date=row.due_date,
        status=row.status,
        creator_id=row.creator_id,
        assignee_id=row.assignee_id,
        team_id=row.team_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
