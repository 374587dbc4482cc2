"""Idempotent database seed helpers for local development environments."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select
from sqlalchemy.orm import Session

from tasktracker.infra.passwords.werkzeug_hasher import WerkzeugPasswordHasher
from tasktracker.models.task import Priority, Task
from tasktracker.models.team import Team
from tasktracker.models.user import User

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

# Fixed reference date so repeated runs produce identical due dates.
BASE_DATE = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)

USER_FIXTURES: list[dict[str, str]] = [
    {
        "email": "alex.martinez@example.com",
        "first_name": "Alex",
        "last_name": "Martinez",
        "password": "devPass123!",
    },
    {
        "email": "jamie.lee@example.com",
        "first_name": "Jamie",
        "last_name": "Lee",
        "password": "strongPass123",
    },
    {
        "email": "sara.kim@example.com",
        "first_name": "Sara",
        "last_name": "Kim",
        "password": "shipIt2024",
    },
    {
        "email": "maria.garcia@example.com",
        "first_name": "Maria",
        "last_name": "Garcia",
        "password": "reviewMe42",
    },
]

TEAM_FIXTURES: list[dict[str, Any]] = [
    {
        "name": "Platform",
        "description": "Backend services and infrastructure.",
        "owner_email": "alex.martinez@example.com",
        "member_emails": ["jamie.lee@example.com", "sara.kim@example.com"],
    },
    {
        "name": "Design",
        "description": "Product design and research.",
        "owner_email": "maria.garcia@example.com",
        "member_emails": ["sara.kim@example.com"],
    },
]

TASK_FIXTURES: list[dict[str, Any]] = [
    {
        "title": "Rotate signing secret",
        "description": "Roll the JWT signing secret in staging.",
        "priority": Priority.HIGH,
        "due_in_days": 3,
        "creator_email": "alex.martinez@example.com",
        "assignee_email": "jamie.lee@example.com",
        "team": "Platform",
    },
    {
        "title": "Add database indexes",
        "description": None,
        "priority": Priority.MEDIUM,
        "due_in_days": 7,
        "creator_email": "jamie.lee@example.com",
        "assignee_email": "sara.kim@example.com",
        "team": "Platform",
    },
    {
        "title": "Onboarding wireframes",
        "description": "First draft for the team invite flow.",
        "priority": Priority.CRITICAL,
        "due_in_days": 2,
        "creator_email": "maria.garcia@example.com",
        "assignee_email": "sara.kim@example.com",
        "team": "Design",
    },
    {
        "title": "Book dentist appointment",
        "description": None,
        "priority": Priority.LOW,
        "due_in_days": 14,
        "creator_email": "sara.kim@example.com",
        "assignee_email": None,
        "team": None,
    },
]


def _session(database: SQLAlchemy) -> Session:
    """Return the current SQLAlchemy session."""
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    """Update summary counters for the given table."""
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    if created:
        entry["created"] += 1
    else:
        entry["existing"] += 1


def _get_or_create(
    session: Session,
    model: type[T],
    *,
    defaults: dict[str, Any] | None = None,
    **filters: Any,
) -> tuple[T, bool]:
    """Fetch ``model`` by ``filters`` or create it using ``defaults``."""
    instance = session.execute(select(model).filter_by(**filters)).scalar_one_or_none()
    if instance is not None:
        return instance, False
    params = dict(defaults or {})
    params.update(filters)
    instance = cast(T, model(**params))
    session.add(instance)
    return instance, True


def seed_users(
    database: SQLAlchemy, *, verbose: bool = False, hasher: WerkzeugPasswordHasher | None = None
) -> dict[str, dict[str, int]]:
    """Create demo identities; existing ones keep their password."""
    if verbose:
        LOGGER.info("Seeding users...")
    session = _session(database)
    hasher = hasher or WerkzeugPasswordHasher()
    summary: dict[str, dict[str, int]] = {}

    for fixture in USER_FIXTURES:
        email = fixture["email"].strip().lower()
        user = session.execute(select(User).filter_by(email=email)).scalar_one_or_none()
        created = user is None
        if user is None:
            user = User(
                email=email,
                first_name=fixture["first_name"],
                last_name=fixture["last_name"],
                password_hash=hasher.hash(fixture["password"]),
            )
            session.add(user)
        else:
            user.first_name = fixture["first_name"]
            user.last_name = fixture["last_name"]
        session.flush()
        _touch(summary, "users", created)

    return summary


def seed_teams_and_tasks(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create demo teams, memberships and tasks on top of the seeded users."""
    if verbose:
        LOGGER.info("Seeding teams and tasks...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    users = {u.email: u for u in session.execute(select(User)).scalars()}

    def _user(email: str) -> User:
        user = users.get(email)
        if user is None:
            raise RuntimeError(f"User {email} missing; run the user seeder first")
        return user

    teams: dict[str, Team] = {}
    for fixture in TEAM_FIXTURES:
        owner = _user(fixture["owner_email"])
        team, created = _get_or_create(
            session,
            Team,
            defaults={"description": fixture["description"], "owner": owner},
            name=fixture["name"],
            owner_id=owner.id,
        )
        session.flush()
        _touch(summary, "teams", created)

        for email in fixture["member_emails"]:
            member = _user(email)
            is_new = member.id not in team.member_ids
            if is_new:
                team.members.append(member)
            _touch(summary, "team_members", is_new)
        session.flush()
        teams[team.name] = team

    for fixture in TASK_FIXTURES:
        creator = _user(fixture["creator_email"])
        assignee = _user(fixture["assignee_email"]) if fixture["assignee_email"] else None
        team = teams[fixture["team"]] if fixture["team"] else None
        _, created = _get_or_create(
            session,
            Task,
            defaults={
                "description": fixture["description"],
                "priority": fixture["priority"],
                "due_date": BASE_DATE + timedelta(days=fixture["due_in_days"]),
                "assignee_id": assignee.id if assignee else None,
                "team_id": team.id if team else None,
            },
            title=fixture["title"],
            creator_id=creator.id,
        )
        session.flush()
        _touch(summary, "tasks", created)

    return summary


def run_all(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Run all seeders in foreign-key order and commit once."""
    if verbose:
        LOGGER.info("Running full seed pipeline...")
    combined: dict[str, dict[str, int]] = {}
    for func in (seed_users, seed_teams_and_tasks):
        result = func(database, verbose=verbose)
        for table, counters in result.items():
            entry = combined.setdefault(table, {"created": 0, "existing": 0})
            entry["created"] += counters.get("created", 0)
            entry["existing"] += counters.get("existing", 0)
    _session(database).commit()
    return combined


__all__ = [
    "run_all",
    "seed_teams_and_tasks",
    "seed_users",
]
