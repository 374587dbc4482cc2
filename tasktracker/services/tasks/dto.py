"""DTOs for TaskService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tasktracker.models.base import EntityStatus
from tasktracker.models.task import Priority

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TaskCreateIn:
    """
    Input DTO for creating a task; the caller becomes its creator.

    :param title: Title (max 150 chars).
    :type title: str
    :param due_date: Due date.
    :type due_date: datetime
    :param description: Optional free text.
    :type description: str | None
    :param priority: Priority (enum or its value).
    :type priority: Priority | str
    :param assignee_id: Optional initial assignee.
    :type assignee_id: str | None
    :param team_id: Optional team scope.
    :type team_id: str | None
    """

    title: str
    due_date: datetime
    description: str | None = None
    priority: Priority | str = Priority.MEDIUM
    assignee_id: str | None = None
    team_id: str | None = None


@dataclass(frozen=True, slots=True)
class TaskUpdateIn:
    """
    Input DTO for updating a task. ``None`` leaves a field untouched; use
    ``clear_team`` / ``clear_assignee`` to drop an association.

    :param title: New title.
    :type title: str | None
    :param description: New description.
    :type description: str | None
    :param priority: New priority.
    :type priority: Priority | str | None
    :param due_date: New due date.
    :type due_date: datetime | None
    :param status: New status.
    :type status: EntityStatus | str | None
    :param team_id: Move the task to this team.
    :type team_id: str | None
    :param assignee_id: Reassign the task.
    :type assignee_id: str | None
    :param clear_team: Detach the task from its team.
    :type clear_team: bool
    :param clear_assignee: Remove the assignee.
    :type clear_assignee: bool
    """

    title: str | None = None
    description: str | None = None
    priority: Priority | str | None = None
    due_date: datetime | None = None
    status: EntityStatus | str | None = None
    team_id: str | None = None
    assignee_id: str | None = None
    clear_team: bool = False
    clear_assignee: bool = False


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class TaskOut:
    id: str
    title: str
    description: str | None
    priority: Priority
    due_date: datetime
    status: EntityStatus
    creator_id: str
    assignee_id: str | None
    team_id: str | None
    created_at: datetime
    updated_at: datetime
