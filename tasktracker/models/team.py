"""Team model and its membership association table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, Index, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tasktracker.core.extensions import db

from .base import ReprMixin, StatusMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .task import Task
    from .user import User


# Pure association: membership carries no payload of its own.
team_members = Table(
    "team_members",
    db.metadata,
    Column("team_id", ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Index("ix_team_members_user_id", "user_id"),
)


class Team(UUIDPKMixin, StatusMixin, TimestampMixin, ReprMixin, db.Model):
    """
    Group of users with exactly one owner.

    Notes
    -----
    - ``owner_id``: the owning identity. Ownership is not membership; the owner
      appears in ``members`` only when explicitly added.
    - ``members``: distinct identities (enforced by the association PK).
    - Deletion is soft: ``status`` becomes ``Inactive``.
    """

    __tablename__ = "teams"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    owner_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # Relationships
    owner: Mapped[User] = relationship(
        "User", back_populates="owned_teams", foreign_keys=[owner_id], lazy="selectin"
    )
    members: Mapped[list[User]] = relationship(
        "User", secondary=team_members, back_populates="teams", lazy="selectin"
    )
    tasks: Mapped[list[Task]] = relationship("Task", back_populates="team", lazy="select")

    @property
    def member_ids(self) -> frozenset[str]:
        """Return the ids of all current members."""
        return frozenset(member.id for member in self.members)

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Team name is required.")
        v = value.strip()
        if len(v) > 100:
            raise ValueError("Team name must be at most 100 characters.")
        return v
