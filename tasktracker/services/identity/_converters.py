from __future__ import annotations

from tasktracker.models.user import User

from .dto import UserPublicOut


def user_to_public(row: User) -> UserPublicOut:
    return UserPublicOut(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        name=row.display_name,
        status=row.status,
    )
