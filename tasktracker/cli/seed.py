"""``flask seed``: load demo identities, teams and tasks.

Commands
--------
``flask seed run``
    Idempotent: re-running only counts rows as existing.
``flask seed users``
    Seed the demo identities only.
``flask seed fresh``
    Drop and recreate the schema first; refused outside debug/testing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import click
from flask import current_app
from flask.cli import AppGroup
from flask_sqlalchemy import SQLAlchemy

from tasktracker.core.extensions import db
from tasktracker.seeds import seed_data

logger = logging.getLogger(__name__)

Summary = dict[str, dict[str, int]]
Seeder = Callable[..., Summary]

seed_cli = AppGroup("seed", help="Seed the database with TaskTracker demo data.")


def _report(summary: Summary) -> None:
    click.echo("Seed summary:")
    if not summary:
        click.echo("  nothing to do")
        return
    for table in sorted(summary):
        counters = summary[table]
        click.echo(
            f"  {table}: created={counters.get('created', 0)} existing={counters.get('existing', 0)}"
        )


def _commit_users(database: SQLAlchemy, *, verbose: bool = False) -> Summary:
    summary = seed_data.seed_users(database, verbose=verbose)
    database.session.commit()
    return summary


def _seed(seeder: Seeder, *, verbose: bool) -> None:
    """Run ``seeder`` and print its summary; roll back and fail loudly on error."""
    if verbose:
        logging.getLogger(seed_data.__name__).setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    try:
        summary = seeder(db, verbose=verbose)
    except Exception as exc:
        db.session.rollback()
        logger.exception("Seeding aborted")
        raise click.ClickException(f"Seeding failed: {exc}") from exc
    _report(summary)


def _is_disposable_environment() -> bool:
    config = current_app.config
    if str(config.get("APP_ENV", "")).lower() == "production":
        return False
    return bool(config.get("DEBUG") or config.get("TESTING"))


verbose_option = click.option("--verbose", is_flag=True, help="Log each seeding step.")


@seed_cli.command("run")
@verbose_option
def run_command(verbose: bool) -> None:
    """Seed demo users, teams and tasks (safe to repeat)."""
    _seed(seed_data.run_all, verbose=verbose)


@seed_cli.command("users")
@verbose_option
def users_command(verbose: bool) -> None:
    """Seed only the demo identities."""
    _seed(_commit_users, verbose=verbose)


@seed_cli.command("fresh")
@verbose_option
@click.option("--yes", is_flag=True, help="Do not ask before dropping tables.")
def fresh_command(verbose: bool, yes: bool) -> None:
    """Recreate the schema from scratch, then seed everything."""
    if not _is_disposable_environment():
        raise click.UsageError("'flask seed fresh' is restricted to non-production environments.")
    if not yes:
        click.confirm("All TaskTracker tables will be dropped. Continue?", abort=True)

    logger.info("Recreating database schema")
    db.session.remove()
    db.drop_all()
    db.create_all()
    _seed(seed_data.run_all, verbose=verbose)
