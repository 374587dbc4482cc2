from __future__ import annotations

from .snapshots import TeamSnapshot


def has_team_access(user_id: str | None, team: TeamSnapshot | None) -> bool:
    """Return True if ``user_id`` owns or belongs to ``team`` (False without a team)."""
    return team is not None and team.has_access(user_id)
