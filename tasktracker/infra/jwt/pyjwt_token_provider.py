# tasktracker/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

import binascii
import json
import secrets
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import jwt
from jwt.utils import base64url_decode

from tasktracker.core.config import AuthSettings
from tasktracker.services._shared.claims import Claims
from tasktracker.services._shared.errors import (
    InvalidIssuerOrAudienceError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from tasktracker.services._shared.ports import IssuedToken, TokenProvider, TokenSubject

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_BYTES = 32
REQUIRED_CLAIMS = ("sub", "email", "exp", "iat", "jti", "iss", "aud")


def _timestamp_to_datetime(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=UTC)


def _has_readable_claims(token: str) -> bool:
    """Return True when the header and payload segments decode to JSON objects."""
    segments = token.split(".")
    if len(segments) != 3:
        return False
    try:
        header, payload = (json.loads(base64url_decode(segment)) for segment in segments[:2])
    except (binascii.Error, ValueError):
        return False
    return isinstance(header, dict) and isinstance(payload, dict)


@dataclass(frozen=True, slots=True)
class PyJWTTokenProvider(TokenProvider):
    """
    Token issuer and validator backed by PyJWT.

    Access tokens are HMAC-signed JWTs; refresh tokens are opaque random
    strings with no claims. The signing algorithm is pinned: validation only
    accepts ``settings.algorithm``, so ``alg: none`` and algorithm swaps are
    rejected as malformed.

    :param settings: Validated token settings built at startup.
    :type settings: AuthSettings
    """

    settings: AuthSettings

    # ------------------------------------------------------------------ #
    # Issuing
    # ------------------------------------------------------------------ #

    def issue_access_token(self, subject: TokenSubject, *, now: datetime | None = None) -> IssuedToken:
        """
        Sign an access token for ``subject``.

        :param subject: Identity (id, email and name parts).
        :type subject: TokenSubject
        :param now: Issue time; defaults to the current UTC time.
        :type now: datetime | None
        :returns: Encoded token and its expiry.
        :rtype: IssuedToken
        """
        issued_at = now or datetime.now(UTC)
        expires_at = issued_at + self.settings.access_lifetime
        payload: dict[str, Any] = {
            "sub": str(subject.id),
            "name": subject.display_name,
            "email": subject.email,
            "given_name": subject.first_name,
            "family_name": subject.last_name,
            "iss": self.settings.issuer,
            "aud": self.settings.audience,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": expires_at,
            "jti": str(uuid.uuid4()),
            "type": ACCESS_TOKEN_TYPE,
        }
        token = jwt.encode(payload, self.settings.secret, algorithm=self.settings.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def issue_refresh_token(self, *, now: datetime | None = None) -> IssuedToken:
        """Return a fresh opaque refresh token (256 bits, URL-safe text)."""
        issued_at = now or datetime.now(UTC)
        return IssuedToken(
            token=secrets.token_urlsafe(REFRESH_TOKEN_BYTES),
            expires_at=issued_at + self.settings.refresh_lifetime,
        )

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate(self, token: str, *, require_unexpired: bool = True) -> Claims:
        """
        Verify an access token and return its claims.

        Signature, issuer and audience are always verified. Lifetime (``exp``
        and ``nbf``) is only enforced when ``require_unexpired`` is set, which
        lets the refresh flow read the identity out of an expired token.

        :param token: Encoded access token.
        :type token: str
        :param require_unexpired: Enforce the token lifetime.
        :type require_unexpired: bool
        :returns: Verified claims.
        :rtype: Claims
        :raises InvalidSignatureError: When the signature does not verify.
        :raises InvalidIssuerOrAudienceError: When ``iss`` or ``aud`` mismatch.
        :raises TokenExpiredError: When expired and ``require_unexpired`` is set.
        :raises MalformedTokenError: For anything else (encoding, claims, type, alg).
        """
        if not token or not isinstance(token, str):
            raise MalformedTokenError("Token is empty.")

        try:
            payload = jwt.decode(
                token,
                self.settings.secret,
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                audience=self.settings.audience,
                options={
                    "require": list(REQUIRED_CLAIMS),
                    "verify_exp": require_unexpired,
                    "verify_nbf": require_unexpired,
                },
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired.") from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignatureError("Token signature is invalid.") from exc
        except (jwt.InvalidIssuerError, jwt.InvalidAudienceError) as exc:
            raise InvalidIssuerOrAudienceError("Token issuer or audience mismatch.") from exc
        except jwt.DecodeError as exc:
            # A corrupted signature segment can fail base64 decoding before HMAC verification.
            if _has_readable_claims(token):
                raise InvalidSignatureError("Token signature is invalid.") from exc
            raise MalformedTokenError(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError(str(exc)) from exc

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise MalformedTokenError("Token is not an access token.")

        try:
            return Claims(
                subject_id=str(payload["sub"]),
                email=str(payload["email"]),
                name=str(payload.get("name", "")),
                issuer=str(payload["iss"]),
                audience=str(payload["aud"]),
                issued_at=_timestamp_to_datetime(payload["iat"]),
                expires_at=_timestamp_to_datetime(payload["exp"]),
                token_id=str(payload["jti"]),
            )
        except (TypeError, ValueError, OverflowError) as exc:
            raise MalformedTokenError("Token claims are malformed.") from exc
