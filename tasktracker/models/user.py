"""User model: identity record and its refresh-token credential."""

from __future__ import annotations

import hashlib
import hmac
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from tasktracker.core.extensions import db

from .base import ReprMixin, StatusMixin, TimestampMixin, UUIDPKMixin, as_utc

if TYPE_CHECKING:
    from .team import Team


def hash_refresh_token(raw: str) -> str:
    """Return the SHA-256 hex digest under which a refresh token is stored.

    :param raw: Refresh token as handed to the client.
    :type raw: str
    :returns: 64-character hex digest.
    :rtype: str
    """
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class User(UUIDPKMixin, StatusMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity plus its current refresh-token credential.

    Fields
    ------
    first_name, last_name : str
        Required name parts (max 50 chars each, trimmed).
    email : str
        Login key. Stored normalized (lowercase, trimmed) and globally unique.
    password_hash : str
        Verifier produced by the password hasher port.
    refresh_token_hash : str | None
        SHA-256 digest of the single valid refresh token.
    refresh_token_expires_at : datetime | None
        Expiry of that token. Always set or cleared together with the digest.
    status : EntityStatus
        ``Inactive`` marks a soft-deleted identity.
    """

    __tablename__ = "users"

    # Columns
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    refresh_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    refresh_token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_refresh_token_hash", "refresh_token_hash"),
    )

    # Relationships
    owned_teams: Mapped[list[Team]] = relationship(
        "Team", back_populates="owner", foreign_keys="Team.owner_id", lazy="selectin"
    )
    teams: Mapped[list[Team]] = relationship(
        "Team", secondary="team_members", back_populates="members", lazy="selectin"
    )

    # -------------------- Derived --------------------
    @property
    def display_name(self) -> str:
        """Return ``"First Last"`` as carried in the ``name`` claim."""
        return f"{self.first_name} {self.last_name}"

    # -------------------- Refresh credential --------------------
    def set_refresh_token(self, raw: str, expires_at: datetime) -> None:
        """
        Replace the stored refresh credential (token digest and expiry together).

        :param raw: Plain refresh token issued to the client.
        :type raw: str
        :param expires_at: Absolute expiry (UTC).
        :type expires_at: datetime
        """
        self.refresh_token_hash = hash_refresh_token(raw)
        self.refresh_token_expires_at = expires_at

    def clear_refresh_token(self) -> None:
        """Drop the stored refresh credential."""
        self.refresh_token_hash = None
        self.refresh_token_expires_at = None

    def refresh_token_matches(self, raw: str, now: datetime) -> bool:
        """
        Check a presented refresh token against the stored credential.

        Uses a constant-time digest comparison and requires the stored expiry
        to lie strictly after ``now``.

        :param raw: Refresh token presented by the client.
        :type raw: str
        :param now: Reference time (UTC).
        :type now: datetime
        :returns: ``True`` when the token is the current, unexpired one.
        :rtype: bool
        """
        if not raw or self.refresh_token_hash is None:
            return False
        expires_at = as_utc(self.refresh_token_expires_at)
        if expires_at is None or expires_at <= now:
            return False
        return hmac.compare_digest(self.refresh_token_hash, hash_refresh_token(raw))

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("first_name", "last_name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        v = value.strip()
        if len(v) > 50:
            raise ValueError(f"{key} must be at most 50 characters.")
        return v
