"""Unit tests for the User model: normalization, uniqueness and refresh credential."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from tasktracker.models import EntityStatus, User
from tasktracker.models.user import hash_refresh_token
from tests.factories.user import UserFactory


class TestUserModel:
    def test_defaults_and_display_name(self, session):
        user = UserFactory(first_name="Ada", last_name="Lovelace")

        assert user.id and len(user.id) == 36
        assert user.status == EntityStatus.ACTIVE
        assert user.is_active
        assert user.display_name == "Ada Lovelace"
        assert user.refresh_token_hash is None

    def test_email_is_normalized(self, session):
        user = UserFactory(email="  Mixed.Case@Example.COM ")
        assert user.email == "mixed.case@example.com"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "user@localhost"])
    def test_invalid_email_rejected(self, email):
        with pytest.raises(ValueError):
            User(email=email, first_name="A", last_name="B", password_hash="x")

    @pytest.mark.parametrize("field", ["first_name", "last_name"])
    def test_names_required_and_bounded(self, field):
        kwargs = {"email": "a@example.com", "first_name": "A", "last_name": "B", "password_hash": "x"}
        with pytest.raises(ValueError):
            User(**{**kwargs, field: "   "})
        with pytest.raises(ValueError):
            User(**{**kwargs, field: "x" * 51})

    def test_email_is_unique(self, session):
        UserFactory(email="dup@example.com")
        with pytest.raises(IntegrityError):
            UserFactory(email="DUP@example.com")
        session.rollback()


class TestRefreshCredential:
    def test_set_stores_digest_not_token(self):
        user = User(email="a@example.com", first_name="A", last_name="B", password_hash="x")
        expires = datetime.now(UTC) + timedelta(days=1)

        user.set_refresh_token("raw-token", expires)

        assert user.refresh_token_hash == hash_refresh_token("raw-token")
        assert user.refresh_token_hash != "raw-token"
        assert user.refresh_token_expires_at == expires

    def test_matches_only_current_unexpired_token(self):
        user = User(email="a@example.com", first_name="A", last_name="B", password_hash="x")
        now = datetime.now(UTC)
        user.set_refresh_token("current", now + timedelta(minutes=1))

        assert user.refresh_token_matches("current", now)
        assert not user.refresh_token_matches("previous", now)
        assert not user.refresh_token_matches("", now)
        assert not user.refresh_token_matches("current", now + timedelta(minutes=1))

    def test_clear_drops_digest_and_expiry(self):
        user = User(email="a@example.com", first_name="A", last_name="B", password_hash="x")
        user.set_refresh_token("current", datetime.now(UTC) + timedelta(days=1))

        user.clear_refresh_token()

        assert user.refresh_token_hash is None
        assert user.refresh_token_expires_at is None
        assert not user.refresh_token_matches("current", datetime.now(UTC))

    def test_naive_expiry_from_storage_is_treated_as_utc(self):
        user = User(email="a@example.com", first_name="A", last_name="B", password_hash="x")
        now = datetime.now(UTC)
        user.set_refresh_token("current", (now + timedelta(minutes=5)).replace(tzinfo=None))

        assert user.refresh_token_matches("current", now)
