"""User repository: identity lookups and the refresh-token credential store."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import cast

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select, update

from tasktracker.models.base import EntityStatus
from tasktracker.models.user import User, hash_refresh_token
from tasktracker.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Besides identity lookups this is the credential store for refresh tokens:
    the token digest and its expiry live on the same row, so they are always
    read in one statement and written in one statement.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "email": User.email,
            "first_name": User.first_name,
            "last_name": User.last_name,
            "created_at": User.created_at,
        }

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not credentials)."""
        return {"first_name", "last_name", "email", "status"}

    def _soft_delete(self, instance: User) -> bool:
        """Identities are never hard-deleted."""
        instance.status = EntityStatus.INACTIVE
        return True

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str, *, for_update: bool = False) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :param for_update: Lock the row for the rest of the transaction.
        :type for_update: bool
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        if for_update:
            stmt = stmt.with_for_update()
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == normalize_email(email))
        return bool(self.session.execute(stmt).first())

    def list_by_emails(self, emails: Iterable[str]) -> list[User]:
        """Return active users whose email is in ``emails`` (normalized)."""
        wanted = {normalize_email(e) for e in emails if e and e.strip()}
        if not wanted:
            return []
        stmt = select(User).where(User.email.in_(wanted), User.status != EntityStatus.INACTIVE)
        return self._list(stmt, sort=["email"])

    def list_by_ids(self, user_ids: Iterable[str]) -> list[User]:
        ids = set(user_ids)
        if not ids:
            return []
        return self._list(select(User).where(User.id.in_(ids)), sort=["email"])

    def list_team_members(self, team_id: str) -> list[User]:
        """List members of a team (owner excluded unless also a member)."""
        stmt = select(User).where(User.teams.any(id=team_id))
        return self._list(stmt, sort=["first_name", "last_name"])

    # ---------------------------- Refresh credential ----------------------------

    def store_refresh_token(self, user: User, raw: str, expires_at: datetime) -> None:
        """Overwrite the user's refresh credential and flush.

        :param user: Identity row (ideally locked by the caller).
        :type user: User
        :param raw: Plain refresh token handed to the client.
        :type raw: str
        :param expires_at: Absolute expiry (UTC).
        :type expires_at: datetime
        """
        user.set_refresh_token(raw, expires_at)
        self.flush()

    def rotate_refresh_token(
        self,
        user_id: str,
        *,
        presented: str,
        new_token: str,
        new_expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Compare-and-swap the refresh credential in a single ``UPDATE``.

        The row is only updated when it still holds the presented token, that
        token is unexpired and the identity is active. Concurrent rotations of
        the same value therefore cannot both succeed.

        :param user_id: Identity id.
        :type user_id: str
        :param presented: Refresh token presented by the client.
        :type presented: str
        :param new_token: Replacement refresh token.
        :type new_token: str
        :param new_expires_at: Replacement expiry.
        :type new_expires_at: datetime
        :param now: Reference time used for the expiry check.
        :type now: datetime
        :returns: ``True`` when exactly one row was swapped.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(
                User.id == user_id,
                User.refresh_token_hash == hash_refresh_token(presented),
                User.refresh_token_expires_at > now,
                User.status != EntityStatus.INACTIVE,
            )
            .values(
                refresh_token_hash=hash_refresh_token(new_token),
                refresh_token_expires_at=new_expires_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        swapped = result.rowcount == 1

        # In-session copies are stale after a bulk UPDATE.
        key = sa_inspect(User).identity_key_from_primary_key((user_id,))
        cached = self.session.identity_map.get(key) if swapped else None
        if cached is not None:
            self.session.expire(cached, ["refresh_token_hash", "refresh_token_expires_at"])
        return swapped

    def clear_refresh_token(self, user: User) -> None:
        """Drop the user's refresh credential and flush."""
        user.clear_refresh_token()
        self.flush()
