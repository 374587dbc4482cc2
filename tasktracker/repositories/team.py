"""Team repository with membership helpers."""

from __future__ import annotations

from sqlalchemy import or_, select

from tasktracker.models.base import EntityStatus
from tasktracker.models.team import Team
from tasktracker.models.user import User
from tasktracker.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Persistence-only repository for :class:`Team` aggregates."""

    model = Team

    def _sortable_fields(self):
        return {"name": Team.name, "created_at": Team.created_at}

    def _updatable_fields(self):
        return {"name", "description", "owner_id", "status"}

    def _soft_delete(self, instance: Team) -> bool:
        instance.status = EntityStatus.INACTIVE
        return True

    # ---------------------------- Queries ----------------------------

    def list_for_user(self, user_id: str) -> list[Team]:
        """List active teams the user owns or belongs to, ordered by name."""
        stmt = select(Team).where(
            Team.status != EntityStatus.INACTIVE,
            or_(Team.owner_id == user_id, Team.members.any(User.id == user_id)),
        )
        return self._list(stmt, sort=["name"])

    # ---------------------------- Membership ----------------------------

    def add_member(self, team: Team, user: User) -> None:
        """Append ``user`` to the member set (caller checks duplicates)."""
        team.members.append(user)
        self.flush()

    def remove_member(self, team: Team, user_id: str) -> None:
        team.members[:] = [m for m in team.members if m.id != user_id]
        self.flush()

    def replace_members(self, team: Team, users: list[User]) -> None:
        """Replace the whole member set, de-duplicating by id."""
        unique: dict[str, User] = {u.id: u for u in users}
        team.members[:] = list(unique.values())
        self.flush()
