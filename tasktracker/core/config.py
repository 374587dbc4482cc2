"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

from tasktracker.services._shared.errors import ConfigurationError

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# HMAC family only: the signing secret doubles as the verification key.
SUPPORTED_JWT_ALGORITHMS: Final[frozenset[str]] = frozenset({"HS256", "HS384", "HS512"})
MIN_SECRET_BYTES: Final[int] = 32


# Load .env in development (no-op when absent)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, keeping ``default`` when unset.

    Malformed values are kept as strings so :meth:`AuthSettings.from_mapping`
    reports them as a configuration error at startup.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return val  # type: ignore[return-value]


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str | None
        HMAC key for signing access tokens. At least 32 bytes.
    JWT_ISSUER: str
        Expected ``iss`` claim.
    JWT_AUDIENCE: str
        Expected ``aud`` claim.
    JWT_ALGORITHM: str
        Signing algorithm pinned at validation (``HS256`` by default).
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES: int
        Access token lifetime in minutes (60 by default).
    JWT_REFRESH_TOKEN_EXPIRES_DAYS: int
        Refresh token lifetime in days (7 by default).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    SQLALCHEMY_TRACK_MODIFICATIONS: bool
        Disabled to avoid extra overhead from the event system.
    SQLALCHEMY_ECHO: bool
        When ``True`` SQLAlchemy logs SQL statements for debugging.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    DEBUG: bool
        Toggles Flask debug mode.
    TESTING: bool
        Enables Flask testing mode when ``True``.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY: str | None = os.getenv("JWT_SECRET_KEY")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "tasktracker")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "tasktracker-clients")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_TOKEN_EXPIRES_MINUTES = env_int("JWT_ACCESS_TOKEN_EXPIRES_MINUTES", 60)
    JWT_REFRESH_TOKEN_EXPIRES_DAYS = env_int("JWT_REFRESH_TOKEN_EXPIRES_DAYS", 7)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and ships a throwaway signing secret so a
    fresh checkout boots without a ``.env`` file.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-only-signing-secret-change-me-0123456789")


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True
    JWT_SECRET_KEY = "testing-signing-secret-0123456789abcdef"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    No signing secret default: a missing ``JWT_SECRET_KEY`` aborts startup.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


# --------------------------------------------------------------------------- #
# Immutable auth settings
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Validated, immutable token settings shared by issuer and validator.

    :param secret: HMAC signing key.
    :type secret: str
    :param issuer: Expected ``iss`` claim.
    :type issuer: str
    :param audience: Expected ``aud`` claim.
    :type audience: str
    :param algorithm: Pinned signing algorithm.
    :type algorithm: str
    :param access_lifetime: Access token lifetime.
    :type access_lifetime: timedelta
    :param refresh_lifetime: Refresh token lifetime.
    :type refresh_lifetime: timedelta
    """

    secret: str
    issuer: str
    audience: str
    algorithm: str = "HS256"
    access_lifetime: timedelta = timedelta(minutes=60)
    refresh_lifetime: timedelta = timedelta(days=7)

    def __repr__(self) -> str:
        return (
            f"AuthSettings(issuer={self.issuer!r}, audience={self.audience!r}, "
            f"algorithm={self.algorithm!r}, access_lifetime={self.access_lifetime}, "
            f"refresh_lifetime={self.refresh_lifetime})"
        )

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthSettings:
        """
        Build settings from a Flask config mapping, failing fast on bad values.

        :param config: Mapping holding the ``JWT_*`` keys.
        :type config: Mapping[str, Any]
        :returns: Validated settings.
        :rtype: AuthSettings
        :raises ConfigurationError: When any value is missing or invalid.
        """
        problems: list[str] = []

        secret = config.get("JWT_SECRET_KEY")
        if not isinstance(secret, str) or not secret.strip():
            problems.append("JWT_SECRET_KEY is required")
        elif len(secret.encode("utf-8")) < MIN_SECRET_BYTES:
            problems.append(f"JWT_SECRET_KEY must be at least {MIN_SECRET_BYTES} bytes")

        issuer = config.get("JWT_ISSUER")
        if not isinstance(issuer, str) or not issuer.strip():
            problems.append("JWT_ISSUER is required")

        audience = config.get("JWT_AUDIENCE")
        if not isinstance(audience, str) or not audience.strip():
            problems.append("JWT_AUDIENCE is required")

        algorithm = str(config.get("JWT_ALGORITHM") or "HS256").upper()
        if algorithm not in SUPPORTED_JWT_ALGORITHMS:
            problems.append(f"JWT_ALGORITHM {algorithm!r} is not supported")

        access_minutes = config.get("JWT_ACCESS_TOKEN_EXPIRES_MINUTES", 60)
        if isinstance(access_minutes, bool) or not isinstance(access_minutes, int) or access_minutes <= 0:
            problems.append("JWT_ACCESS_TOKEN_EXPIRES_MINUTES must be a positive integer")

        refresh_days = config.get("JWT_REFRESH_TOKEN_EXPIRES_DAYS", 7)
        if isinstance(refresh_days, bool) or not isinstance(refresh_days, int) or refresh_days <= 0:
            problems.append("JWT_REFRESH_TOKEN_EXPIRES_DAYS must be a positive integer")

        if problems:
            raise ConfigurationError("Invalid auth configuration: " + "; ".join(problems))

        return cls(
            secret=str(secret),
            issuer=str(issuer).strip(),
            audience=str(audience).strip(),
            algorithm=algorithm,
            access_lifetime=timedelta(minutes=int(access_minutes)),
            refresh_lifetime=timedelta(days=int(refresh_days)),
        )
