"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases.

Services open their own Unit of Work on the same session; a rollback there
discards everything since the last commit, so tests commit their factory
setup (``session.commit()``) before exercising a failing service call.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from tasktracker.core.extensions import db as _db  # Flask-SQLAlchemy instance
from tasktracker.core.extensions import get_auth_settings
from tasktracker.factory import create_app  # application factory under test
from tasktracker.infra.jwt.pyjwt_token_provider import PyJWTTokenProvider
from tests.factories.user import TEST_HASHER


class TestConfig:
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Ships a fixed signing secret so token fixtures are reproducible.
    - Avoids hitting external services.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = "WARNING"

    JWT_SECRET_KEY = "testing-signing-secret-0123456789abcdef"
    JWT_ISSUER = "tasktracker-tests"
    JWT_AUDIENCE = "tasktracker-test-clients"
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES = 15
    JWT_REFRESH_TOKEN_EXPIRES_DAYS = 7


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    The fixture mirrors the SQLAlchemy 2.0 pattern for transactional tests: it
    begins a top-level transaction, starts a SAVEPOINT per test, and reinstalls
    the SAVEPOINT whenever SQLAlchemy ends one.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Credential adapters ---------------------------------------------------------
@pytest.fixture(scope="session")
def auth_settings(app):
    """Settings validated by the app factory."""
    return get_auth_settings(app)


@pytest.fixture(scope="session")
def token_provider(auth_settings):
    return PyJWTTokenProvider(auth_settings)


@pytest.fixture(scope="session")
def hasher():
    """Fast werkzeug hasher shared with the user factory."""
    return TEST_HASHER


@pytest.fixture()
def claims_for(token_provider):
    """Return a helper minting verified claims for a persisted user."""

    def _claims(user):
        issued = token_provider.issue_access_token(user)
        return token_provider.validate(issued.token)

    return _claims


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
