"""Task model (a to-do item optionally scoped to a team)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tasktracker.core.extensions import db

from .base import ReprMixin, StatusMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .team import Team
    from .user import User


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Task(UUIDPKMixin, StatusMixin, TimestampMixin, ReprMixin, db.Model):
    """
    Unit of work created by one user and optionally assigned and team-scoped.

    Notes
    -----
    - ``creator_id`` is set once at creation and never changes.
    - ``assignee_id`` and ``team_id`` are optional; when both are set the
      assignee was a team owner/member at the moment of assignment.
    - Deletion is soft: ``status`` becomes ``Inactive``.
    """

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    priority: Mapped[Priority] = mapped_column(
        SAEnum(
            Priority,
            name="task_priority",
            native_enum=False,
            create_constraint=True,
            length=10,
            values_callable=lambda enum: [member.value for member in enum],
            validate_strings=True,
        ),
        nullable=False,
        default=Priority.MEDIUM,
    )
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    creator_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    assignee_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    team_id: Mapped[str | None] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        Index("ix_tasks_creator_id", "creator_id"),
        Index("ix_tasks_assignee_id", "assignee_id"),
        Index("ix_tasks_team_id", "team_id"),
    )

    # Relationships
    creator: Mapped[User] = relationship("User", foreign_keys=[creator_id], lazy="selectin")
    assignee: Mapped[User | None] = relationship(
        "User", foreign_keys=[assignee_id], lazy="selectin"
    )
    team: Mapped[Team | None] = relationship("Team", back_populates="tasks", lazy="selectin")

    @validates("title")
    def _normalize_title(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Task title is required.")
        v = value.strip()
        if len(v) > 150:
            raise ValueError("Task title must be at most 150 characters.")
        return v

    @validates("creator_id")
    def _freeze_creator(self, key: str, value: str) -> str:
        current = self.__dict__.get("creator_id")
        if current is not None and current != value:
            raise ValueError("Task creator cannot be changed.")
        return value
