# tests/unit/services/test_identity_service.py
from __future__ import annotations

import pytest

from tasktracker.models import EntityStatus, User
from tasktracker.services._shared.errors import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from tasktracker.services.auth import AuthService, LoginIn
from tasktracker.services.identity import IdentityService, PasswordChangeIn, UserUpdateIn
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


@pytest.fixture()
def service(hasher) -> IdentityService:
    return IdentityService(password_hasher=hasher)


@pytest.fixture()
def auth(token_provider, hasher) -> AuthService:
    return AuthService(token_provider=token_provider, password_hasher=hasher)


@pytest.fixture()
def user(session):
    u = UserFactory(email="ada@example.com", first_name="Ada", last_name="Lovelace")
    session.commit()
    return u


class TestIdentityQueries:
    def test_get_user_and_by_email(self, service, user):
        by_id = service.get_user(user.id)
        by_email = service.get_user_by_email("ADA@example.com")

        assert by_id == by_email
        assert by_id.name == "Ada Lovelace"
        assert by_id.status == EntityStatus.ACTIVE

    def test_inactive_user_is_not_found(self, service, session, user):
        user.status = EntityStatus.INACTIVE
        session.commit()

        with pytest.raises(NotFoundError):
            service.get_user(user.id)
        with pytest.raises(NotFoundError):
            service.get_user_by_email(user.email)


class TestUpdateUser:
    def test_update_own_profile(self, service, session, user, claims_for):
        out = service.update_user(
            claims_for(user), UserUpdateIn(first_name="Augusta", email="Augusta@Example.com")
        )

        assert out.first_name == "Augusta"
        assert out.last_name == "Lovelace"
        assert out.email == "augusta@example.com"
        session.expire_all()
        assert session.get(User, user.id).email == "augusta@example.com"

    def test_email_taken_by_someone_else_conflicts(self, service, session, user, claims_for):
        UserFactory(email="taken@example.com")
        session.commit()

        with pytest.raises(ConflictError):
            service.update_user(claims_for(user), UserUpdateIn(email="TAKEN@example.com"))

    def test_keeping_own_email_is_not_a_conflict(self, service, user, claims_for):
        out = service.update_user(claims_for(user), UserUpdateIn(email="ada@example.com", last_name="King"))
        assert out.last_name == "King"

    def test_invalid_value_is_validation_error(self, service, session, user, claims_for):
        with pytest.raises(ValidationError):
            service.update_user(claims_for(user), UserUpdateIn(first_name="x" * 51))

        session.expire_all()
        assert session.get(User, user.id).first_name == "Ada"


class TestPasswordAndDeactivation:
    def test_change_password_requires_current_password(self, service, user, claims_for):
        with pytest.raises(UnauthorizedError):
            service.change_password(claims_for(user), PasswordChangeIn(old_password="nope", new_password="n3w!"))
        with pytest.raises(ValidationError):
            service.change_password(
                claims_for(user), PasswordChangeIn(old_password=DEFAULT_PASSWORD, new_password="")
            )

    def test_change_password_revokes_refresh(self, service, auth, session, user, claims_for):
        pair = auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        service.change_password(claims_for(user), PasswordChangeIn(old_password=DEFAULT_PASSWORD, new_password="n3w!"))

        session.expire_all()
        assert session.get(User, user.id).refresh_token_hash is None
        with pytest.raises(UnauthorizedError):
            auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        assert auth.login(LoginIn(email=user.email, password="n3w!")).refresh_token != pair.refresh_token

    def test_deactivate_blocks_login(self, service, auth, session, user, claims_for):
        auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        service.deactivate_user(claims_for(user))

        session.expire_all()
        stored = session.get(User, user.id)
        assert stored.status == EntityStatus.INACTIVE
        assert stored.refresh_token_hash is None
        with pytest.raises(UnauthorizedError):
            auth.login(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        with pytest.raises(NotFoundError):
            service.deactivate_user(claims_for(stored))
