"""Task service layer: creation, assignment and team-scoped listings."""

from __future__ import annotations

from .dto import TaskCreateIn, TaskOut, TaskUpdateIn
from .service import TaskService

__all__ = ["TaskCreateIn", "TaskOut", "TaskService", "TaskUpdateIn"]
