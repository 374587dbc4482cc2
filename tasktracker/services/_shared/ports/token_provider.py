from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from tasktracker.services._shared.claims import Claims


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    An encoded token together with its absolute expiry.

    :param token: Encoded token as handed to the client.
    :type token: str
    :param expires_at: Expiry (UTC).
    :type expires_at: datetime
    """

    token: str
    expires_at: datetime


class TokenSubject(Protocol):
    """Minimal identity shape needed to mint an access token."""

    id: str
    email: str
    first_name: str
    last_name: str

    @property
    def display_name(self) -> str: ...


class TokenProvider(Protocol):
    """Port for issuing access/refresh tokens and validating access tokens."""

    def issue_access_token(self, subject: TokenSubject, *, now: datetime | None = None) -> IssuedToken: ...

    def issue_refresh_token(self, *, now: datetime | None = None) -> IssuedToken: ...

    def validate(self, token: str, *, require_unexpired: bool = True) -> Claims: ...
