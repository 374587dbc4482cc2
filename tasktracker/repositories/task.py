"""Task repository with per-user and per-team listings."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select

from tasktracker.models.base import EntityStatus
from tasktracker.models.task import Task
from tasktracker.repositories.base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Persistence-only repository for :class:`Task`."""

    model = Task

    def _sortable_fields(self):
        return {
            "title": Task.title,
            "due_date": Task.due_date,
            "priority": Task.priority,
            "created_at": Task.created_at,
        }

    def _updatable_fields(self):
        # creator_id is deliberately absent: it is fixed at creation.
        return {"title", "description", "priority", "due_date", "status", "assignee_id", "team_id"}

    def _soft_delete(self, instance: Task) -> bool:
        instance.status = EntityStatus.INACTIVE
        return True

    def _visible(self):
        return select(Task).where(Task.status != EntityStatus.INACTIVE)

    def list_created_by(self, user_id: str, *, sort: Iterable[str] | None = None) -> list[Task]:
        return self._list(self._visible().where(Task.creator_id == user_id), sort=sort or ["due_date"])

    def list_assigned_to(self, user_id: str, *, sort: Iterable[str] | None = None) -> list[Task]:
        return self._list(self._visible().where(Task.assignee_id == user_id), sort=sort or ["due_date"])

    def list_for_team(self, team_id: str, *, sort: Iterable[str] | None = None) -> list[Task]:
        """List every active task tagged with ``team_id``, whoever it is assigned to."""
        return self._list(self._visible().where(Task.team_id == team_id), sort=sort or ["due_date"])
