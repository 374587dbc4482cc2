"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from tasktracker.repositories.base import BaseRepository, apply_sorting, parse_sort_tokens
from tasktracker.repositories.task import TaskRepository
from tasktracker.repositories.team import TeamRepository
from tasktracker.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "apply_sorting",
    "parse_sort_tokens",
    # Domain
    "TaskRepository",
    "TeamRepository",
    "UserRepository",
]
