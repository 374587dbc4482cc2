"""Caller identity extracted from a validated access token."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Claims:
    """
    Verified claims of an access token.

    Services receive this value explicitly for every call made on behalf of a
    caller; there is no ambient "current user".

    :param subject_id: Identity id (``sub``).
    :type subject_id: str
    :param email: Identity email at issuance.
    :type email: str
    :param name: Display name (``"First Last"``).
    :type name: str
    :param issuer: ``iss`` claim.
    :type issuer: str
    :param audience: ``aud`` claim.
    :type audience: str
    :param issued_at: ``iat`` claim.
    :type issued_at: datetime
    :param expires_at: ``exp`` claim.
    :type expires_at: datetime
    :param token_id: ``jti`` claim.
    :type token_id: str
    """

    subject_id: str
    email: str
    name: str
    issuer: str
    audience: str
    issued_at: datetime
    expires_at: datetime
    token_id: str
