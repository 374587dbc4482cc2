"""Unit tests for AuthSettings validation and app factory wiring."""

from __future__ import annotations

from datetime import timedelta

import pytest

from tasktracker.core.config import AuthSettings, DevelopmentConfig, get_config
from tasktracker.factory import create_app
from tasktracker.services._shared.errors import ConfigurationError

VALID = {
    "JWT_SECRET_KEY": "x" * 32,
    "JWT_ISSUER": "tasktracker",
    "JWT_AUDIENCE": "clients",
    "JWT_ALGORITHM": "HS256",
    "JWT_ACCESS_TOKEN_EXPIRES_MINUTES": 30,
    "JWT_REFRESH_TOKEN_EXPIRES_DAYS": 14,
}


class TestAuthSettings:
    def test_from_mapping_builds_immutable_settings(self):
        settings = AuthSettings.from_mapping(VALID)

        assert settings.issuer == "tasktracker"
        assert settings.audience == "clients"
        assert settings.access_lifetime == timedelta(minutes=30)
        assert settings.refresh_lifetime == timedelta(days=14)
        with pytest.raises(AttributeError):
            settings.issuer = "other"  # type: ignore[misc]

    def test_defaults_lifetimes_and_algorithm(self):
        config = {k: v for k, v in VALID.items() if k.startswith(("JWT_SECRET", "JWT_ISS", "JWT_AUD"))}
        settings = AuthSettings.from_mapping(config)

        assert settings.algorithm == "HS256"
        assert settings.access_lifetime == timedelta(minutes=60)
        assert settings.refresh_lifetime == timedelta(days=7)

    @pytest.mark.parametrize(
        "overrides, fragment",
        [
            ({"JWT_SECRET_KEY": None}, "JWT_SECRET_KEY is required"),
            ({"JWT_SECRET_KEY": "short"}, "at least 32 bytes"),
            ({"JWT_ISSUER": "  "}, "JWT_ISSUER is required"),
            ({"JWT_AUDIENCE": ""}, "JWT_AUDIENCE is required"),
            ({"JWT_ALGORITHM": "RS256"}, "not supported"),
            ({"JWT_ALGORITHM": "none"}, "not supported"),
            ({"JWT_ACCESS_TOKEN_EXPIRES_MINUTES": 0}, "JWT_ACCESS_TOKEN_EXPIRES_MINUTES"),
            ({"JWT_REFRESH_TOKEN_EXPIRES_DAYS": "seven"}, "JWT_REFRESH_TOKEN_EXPIRES_DAYS"),
        ],
    )
    def test_rejects_invalid_values(self, overrides, fragment):
        with pytest.raises(ConfigurationError, match=fragment):
            AuthSettings.from_mapping({**VALID, **overrides})

    def test_reports_every_problem_at_once(self):
        with pytest.raises(ConfigurationError) as excinfo:
            AuthSettings.from_mapping({})

        message = str(excinfo.value)
        assert "JWT_SECRET_KEY" in message
        assert "JWT_ISSUER" in message
        assert "JWT_AUDIENCE" in message

    def test_repr_hides_secret(self):
        settings = AuthSettings.from_mapping(VALID)
        assert VALID["JWT_SECRET_KEY"] not in repr(settings)


class TestAppFactory:
    def test_missing_secret_aborts_startup(self):
        class NoSecretConfig:
            TESTING = True
            SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
            JWT_ISSUER = "tasktracker"
            JWT_AUDIENCE = "clients"

        with pytest.raises(ConfigurationError):
            create_app(NoSecretConfig, instance_relative_config=False)

    def test_get_config_selects_by_app_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "testing")
        assert get_config().TESTING is True

        monkeypatch.setenv("APP_ENV", "unknown")
        assert get_config() is DevelopmentConfig

    def test_app_exposes_validated_settings(self, app, auth_settings):
        assert auth_settings.issuer == app.config["JWT_ISSUER"]
        assert auth_settings.access_lifetime == timedelta(minutes=15)
