"""Reusable SQLAlchemy mixins and shared enums for domain models (typed 2.0)."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite.

    :param value: Datetime loaded from the database (or ``None``).
    :type value: datetime | None
    :returns: Timezone-aware datetime or ``None``.
    :rtype: datetime | None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def new_id() -> str:
    """Generate a new textual UUID4 primary key."""
    return str(uuid4())


class EntityStatus(str, Enum):
    """Closed lifecycle status shared by users, teams and tasks."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    ON_HOLD = "OnHold"


class TimestampMixin:
    """Provide ``created_at`` and ``updated_at`` timestamp columns.

    Attributes
    ----------
    created_at:
        Timezone-aware timestamp filled by the database on insert.
    updated_at:
        Timezone-aware timestamp refreshed by the database on update.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class UUIDPKMixin:
    """Expose a textual UUID primary key named ``id``.

    Attributes
    ----------
    id:
        36-character UUID4 string assigned on the Python side at construction
        so the identifier is known before the first flush.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    def __init__(self, **kwargs) -> None:
        kwargs.setdefault("id", new_id())
        super().__init__(**kwargs)


class StatusMixin:
    """Provide a ``status`` column restricted to :class:`EntityStatus`.

    Stored as the enum *value* (``"Active"``, ``"OnHold"``...) in a
    ``VARCHAR(20)`` guarded by a CHECK constraint.
    """

    status: Mapped[EntityStatus] = mapped_column(
        SAEnum(
            EntityStatus,
            name="entity_status",
            native_enum=False,
            create_constraint=True,
            length=20,
            values_callable=lambda enum: [member.value for member in enum],
            validate_strings=True,
        ),
        nullable=False,
        default=EntityStatus.ACTIVE,
    )

    def __init__(self, **kwargs) -> None:
        kwargs.setdefault("status", EntityStatus.ACTIVE)
        super().__init__(**kwargs)

    @property
    def is_active(self) -> bool:
        """Return ``True`` unless the entity was soft-deleted."""
        return self.status != EntityStatus.INACTIVE


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        """Return a short and useful string representation.

        :returns: Debug-friendly ``<ClassName id=...>``.
        :rtype: str
        """
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"
