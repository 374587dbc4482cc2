"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from tasktracker.core.config import AuthSettings

# Global naming convention for all constraints; service code matches on these
# names when translating IntegrityError (see ``errors.violates``).
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)

AUTH_SETTINGS_KEY = "auth_settings"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations and the immutable auth settings.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`tasktracker.models` package so SQLAlchemy metadata is ready for
        migrations.

    Raises
    ------
    ConfigurationError
        When the ``JWT_*`` settings are missing or invalid. Raised here so a
        misconfigured deployment never starts serving.
    """
    app.extensions[AUTH_SETTINGS_KEY] = AuthSettings.from_mapping(app.config)

    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from tasktracker import models as _models  # noqa: F401

    migrate.init_app(app, db)


def get_auth_settings(app: Flask) -> AuthSettings:
    """Return the settings validated during :func:`init_app`."""
    settings = app.extensions.get(AUTH_SETTINGS_KEY)
    if settings is None:
        raise RuntimeError("Auth settings are not initialized. Call init_app() first.")
    return settings
