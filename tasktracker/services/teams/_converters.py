from __future__ import annotations

from operator import attrgetter

from tasktracker.models.team import Team
from tasktracker.services._shared.policies import TeamSnapshot
from tasktracker.services.identity._converters import user_to_public

from .dto import TeamOut


def team_to_snapshot(row: Team) -> TeamSnapshot:
    """Freeze ownership and membership of a loaded team."""
    return TeamSnapshot(
        id=row.id,
        owner_id=row.owner_id,
        member_ids=row.member_ids,
        name=row.name,
        status=row.status,
    )


def team_to_out(row: Team) -> TeamOut:
    members = sorted(row.members, key=attrgetter("first_name", "last_name", "id"))
    return TeamOut(
        id=row.id,
        name=row.name,
        description=row.description,
        owner=user_to_public(row.owner),
        members=tuple(user_to_public(m) for m in members),
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
