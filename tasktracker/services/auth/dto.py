# tasktracker/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from tasktracker.services.identity.dto import UserPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: Login email (normalized by the model).
    :type email: str
    :param password: Raw password (hashed by the password hasher port).
    :type password: str
    :param first_name: First name.
    :type first_name: str
    :param last_name: Last name.
    :type last_name: str
    """

    email: str
    password: str
    first_name: str
    last_name: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param access_token: The (typically expired) access token of the pair.
    :type access_token: str
    :param refresh_token: The refresh token issued with it.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with a freshly issued access/refresh pair.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Opaque refresh token.
    :type refresh_token: str
    :param access_expires_at: Access token expiry (UTC).
    :type access_expires_at: datetime
    :param refresh_expires_at: Refresh token expiry (UTC).
    :type refresh_expires_at: datetime
    :param user: Public view of the identity the pair was issued to.
    :type user: UserPublicOut
    """

    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime
    user: UserPublicOut

    def __repr__(self) -> str:
        return (
            f"TokenPairOut(user_id={self.user.id!r}, access_expires_at={self.access_expires_at}, "
            f"refresh_expires_at={self.refresh_expires_at})"
        )
