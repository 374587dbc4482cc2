from __future__ import annotations

import logging
from typing import Any

from tasktracker.models.base import EntityStatus
from tasktracker.models.task import Priority, Task
from tasktracker.models.team import Team
from tasktracker.repositories.task import TaskRepository
from tasktracker.services._shared.base import BaseService
from tasktracker.services._shared.claims import Claims
from tasktracker.services._shared.deadline import Deadline
from tasktracker.services._shared.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from tasktracker.services._shared.policies import (
    Operation,
    validate_team_scoped_assignment,
    validate_team_scoped_creation,
)
from tasktracker.services.teams._converters import team_to_snapshot

from ._converters import task_to_out, task_to_snapshot
from .dto import TaskCreateIn, TaskOut, TaskUpdateIn

logger = logging.getLogger(__name__)


def _coerce_priority(value: Priority | str) -> Priority:
    try:
        return Priority(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown priority: {value!r}") from exc


def _coerce_status(value: EntityStatus | str) -> EntityStatus:
    try:
        return EntityStatus(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown status: {value!r}") from exc


class TaskService(BaseService):
    """
    Orchestrate task mutations and queries.

    Who may do what is decided by the pure policies on a snapshot of the
    locked task. Every check (including team-scoped assignee validation)
    runs before the first write, so a rejected call leaves the task as it was.
    """

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def create_task(
        self, claims: Claims, dto: TaskCreateIn, *, deadline: Deadline | None = None
    ) -> TaskOut:
        """
        Create a task with the caller as creator.

        :param claims: Verified caller claims.
        :type claims: Claims
        :param dto: Task fields.
        :type dto: TaskCreateIn
        :returns: Created task.
        :rtype: TaskOut
        :raises NotFoundError: If the team or assignee does not exist.
        :raises AuthorizationError: ``CREATOR_NOT_IN_TEAM`` or ``ASSIGNEE_NOT_IN_TEAM``.
        :raises ValidationError: If a field is rejected.
        """
        priority = _coerce_priority(dto.priority)
        if dto.due_date is None:
            raise ValidationError("Task due date is required.")
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            deadline.check("load_creator")
            creator = uow.users.get_active(claims.subject_id)
            if creator is None:
                raise UnauthorizedError()

            team: Team | None = None
            if dto.team_id is not None:
                deadline.check("load_team")
                team = uow.teams.get_active(dto.team_id, for_update=True)
                if team is None:
                    raise NotFoundError("Team", dto.team_id)
            team_snapshot = team_to_snapshot(team) if team is not None else None
            validate_team_scoped_creation(team_snapshot, creator.id).require()

            if dto.assignee_id is not None:
                deadline.check("load_assignee")
                if uow.users.get_active(dto.assignee_id) is None:
                    raise NotFoundError("User", dto.assignee_id)
                validate_team_scoped_assignment(team_snapshot, dto.assignee_id).require()

            deadline.check("create_task")
            with self.model_validation("Task"):
                task = Task(
                    title=dto.title,
                    description=dto.description,
                    priority=priority,
                    due_date=dto.due_date,
                    creator_id=creator.id,
                    assignee_id=dto.assignee_id,
                    team_id=dto.team_id,
                )
                uow.tasks.add(task)

            logger.info(
                "Task created",
                extra={"task_id": task.id, "creator_id": creator.id, "team_id": task.team_id},
            )
            return task_to_out(task)

    def update_task(
        self,
        claims: Claims,
        task_id: str,
        dto: TaskUpdateIn,
        *,
        deadline: Deadline | None = None,
    ) -> TaskOut:
        """
        Update task fields, team scope and/or assignee.

        Any participant may edit fields; changing the assignee additionally
        requires the assign rule. When the resulting task is team-scoped, its
        creator and assignee must belong to that team.

        :raises AuthorizationError: When a rule denies the change.
        :raises NotFoundError: If the task, new team or new assignee is missing.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            task = self._load_task(uow.tasks, task_id, deadline)
            snapshot = task_to_snapshot(task)
            self.ensure_allowed(Operation.MUTATE_TASK, claims.subject_id, snapshot)

            updates: dict[str, Any] = {}
            if dto.title is not None:
                updates["title"] = dto.title
            if dto.description is not None:
                updates["description"] = dto.description
            if dto.priority is not None:
                updates["priority"] = _coerce_priority(dto.priority)
            if dto.due_date is not None:
                updates["due_date"] = dto.due_date
            if dto.status is not None:
                updates["status"] = _coerce_status(dto.status)

            team_snapshot = snapshot.team
            team_changed = False
            if dto.clear_team:
                team_snapshot, team_changed = None, task.team_id is not None
            elif dto.team_id is not None and dto.team_id != task.team_id:
                deadline.check("load_team")
                team = uow.teams.get_active(dto.team_id, for_update=True)
                if team is None:
                    raise NotFoundError("Team", dto.team_id)
                team_snapshot, team_changed = team_to_snapshot(team), True
            if team_changed:
                validate_team_scoped_creation(team_snapshot, task.creator_id).require()
                updates["team_id"] = team_snapshot.id if team_snapshot else None

            assignee_id = task.assignee_id
            if dto.clear_assignee:
                if task.assignee_id is not None:
                    self.ensure_allowed(Operation.UNASSIGN_TASK, claims.subject_id, snapshot)
                    assignee_id = updates["assignee_id"] = None
            elif dto.assignee_id is not None and dto.assignee_id != task.assignee_id:
                self.ensure_allowed(Operation.ASSIGN_TASK, claims.subject_id, snapshot)
                deadline.check("load_assignee")
                if uow.users.get_active(dto.assignee_id) is None:
                    raise NotFoundError("User", dto.assignee_id)
                assignee_id = updates["assignee_id"] = dto.assignee_id

            if assignee_id is not None and (team_changed or "assignee_id" in updates):
                validate_team_scoped_assignment(team_snapshot, assignee_id).require()

            deadline.check("update_task")
            if updates:
                with self.model_validation("Task"):
                    uow.tasks.update(task, **updates)

            logger.info("Task updated", extra={"task_id": task.id, "fields": sorted(updates)})
            return task_to_out(task)

    def assign_task(
        self, claims: Claims, task_id: str, assignee_id: str, *, deadline: Deadline | None = None
    ) -> TaskOut:
        """
        Assign (or reassign) a task.

        :raises AuthorizationError: ``NOT_CREATOR_OR_TEAM_MEMBER`` when the caller
            may not assign, ``ASSIGNEE_NOT_IN_TEAM`` when the candidate is outside
            the task's team.
        :raises NotFoundError: If the task or the assignee is missing.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            task = self._load_task(uow.tasks, task_id, deadline)
            snapshot = task_to_snapshot(task)
            self.ensure_allowed(Operation.ASSIGN_TASK, claims.subject_id, snapshot)

            deadline.check("load_assignee")
            if uow.users.get_active(assignee_id) is None:
                raise NotFoundError("User", assignee_id)
            self.ensure_allowed(
                Operation.ASSIGN_TASK, claims.subject_id, snapshot, target_id=assignee_id
            )

            deadline.check("assign_task")
            uow.tasks.update(task, assignee_id=assignee_id)
            logger.info("Task assigned", extra={"task_id": task.id, "assignee_id": assignee_id})
            return task_to_out(task)

    def unassign_task(self, claims: Claims, task_id: str, *, deadline: Deadline | None = None) -> TaskOut:
        """
        Remove the current assignee.

        :raises ConflictError: If the task has no assignee.
        """
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            task = self._load_task(uow.tasks, task_id, deadline)
            self.ensure_allowed(Operation.UNASSIGN_TASK, claims.subject_id, task_to_snapshot(task))
            if task.assignee_id is None:
                raise ConflictError("Task", "task is not assigned")

            deadline.check("unassign_task")
            previous = task.assignee_id
            uow.tasks.update(task, assignee_id=None)
            logger.info("Task unassigned", extra={"task_id": task.id, "previous_assignee_id": previous})
            return task_to_out(task)

    def delete_task(self, claims: Claims, task_id: str, *, deadline: Deadline | None = None) -> None:
        """Soft-delete a task (any participant)."""
        deadline = self.deadline_or_default(deadline)
        with self.rw_uow(deadline=deadline) as uow:
            task = self._load_task(uow.tasks, task_id, deadline)
            self.ensure_allowed(Operation.MUTATE_TASK, claims.subject_id, task_to_snapshot(task))
            deadline.check("delete_task")
            uow.tasks.delete(task)
            logger.info("Task deleted", extra={"task_id": task.id})

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_task(self, claims: Claims, task_id: str) -> TaskOut:
        """Return a task the caller participates in."""
        with self.ro_uow() as uow:
            task = uow.tasks.get_active(task_id)
            if task is None:
                raise NotFoundError("Task", task_id)
            self.ensure_allowed(Operation.MUTATE_TASK, claims.subject_id, task_to_snapshot(task))
            return task_to_out(task)

    def list_created(self, claims: Claims, *, sort: list[str] | None = None) -> list[TaskOut]:
        with self.ro_uow() as uow:
            return [task_to_out(t) for t in uow.tasks.list_created_by(claims.subject_id, sort=sort)]

    def list_assigned(self, claims: Claims, *, sort: list[str] | None = None) -> list[TaskOut]:
        with self.ro_uow() as uow:
            return [task_to_out(t) for t in uow.tasks.list_assigned_to(claims.subject_id, sort=sort)]

    def list_team_tasks(
        self, claims: Claims, team_id: str, *, sort: list[str] | None = None
    ) -> list[TaskOut]:
        """List every active task tagged with a team the caller owns or belongs to."""
        with self.ro_uow() as uow:
            team = uow.teams.get_active(team_id)
            if team is None:
                raise NotFoundError("Team", team_id)
            self.ensure_allowed(Operation.VIEW_TEAM, claims.subject_id, team_to_snapshot(team))
            return [task_to_out(t) for t in uow.tasks.list_for_team(team.id, sort=sort)]

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _load_task(repo: TaskRepository, task_id: str, deadline: Deadline) -> Task:
        deadline.check("load_task")
        task = repo.get_active(task_id, for_update=True)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task
