"""
Bearer token issue and verification.

Tokens are HMAC-signed JSON Web Tokens carrying the user's identity:

    - ``user_id`` -- integer primary key of the authenticated user.
    - ``email``   -- the address the user logged in with.
    - ``iat``     -- issued-at timestamp (UTC epoch seconds).
    - ``exp``     -- expiration timestamp (UTC epoch seconds).

Tokens are stateless: nothing is stored server-side, so a correctly signed
token stays valid until ``exp`` even if the user's password changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from .errors import InternalError, InvalidSignature, TokenExpired

logger = logging.getLogger(__name__)

SIGNING_ALGORITHM = "HS256"
# Only the HMAC family is accepted; anything else (``none``, RS256 with a
# public key used as an HMAC secret, ...) is rejected before verification.
ALLOWED_ALGORITHMS = ["HS256", "HS384", "HS512"]
REQUIRED_TOKEN_CLAIMS = ["user_id", "email", "iat", "exp"]


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as proven by a verified token."""

    user_id: int
    email: str


def extract_bearer_token(auth_header: str | None) -> str | None:
    """
    Return the token from an ``Authorization: Bearer <token>`` header.

    Returns ``None`` if the header is absent, uses another scheme, or the
    token is empty after stripping whitespace.
    """
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


class TokenService:
    """
    Issues and verifies signed, time-limited bearer tokens.

    Args:
        secret: HMAC key shared by issuer and verifier.
        expiry: Lifetime of a newly issued token.
        leeway_seconds: Clock-skew tolerance applied to ``exp``.
    """

    def __init__(
        self,
        secret: str,
        expiry: timedelta = timedelta(hours=1),
        leeway_seconds: int = 0,
    ) -> None:
        if not secret:
            raise ValueError("secret must be a non-empty string")
        self._secret = secret
        self.expiry = expiry
        self.leeway_seconds = leeway_seconds

    def issue(
        self, user_id: int, email: str, expires_in: timedelta | None = None
    ) -> str:
        """
        Create a signed token for the given identity.

        Args:
            user_id: Primary key of the user.  Must be positive.
            email: The user's email.  Must be non-blank.
            expires_in: Override for the configured lifetime.  A negative
                value yields an already-expired token.

        Raises:
            ValueError: If the identity values are nonsensical.
            InternalError: If signing fails.
        """
        if int(user_id) <= 0:
            raise ValueError("user_id must be a positive integer")
        if not isinstance(email, str) or not email.strip():
            raise ValueError("email must be a non-empty string")

        now = datetime.now(timezone.utc)
        expires_at = now + (self.expiry if expires_in is None else expires_in)
        payload: dict[str, Any] = {
            "user_id": int(user_id),
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=SIGNING_ALGORITHM)
        except jwt.PyJWTError as exc:
            logger.warning("Failed to sign token for user_id=%s: %s", user_id, exc)
            raise InternalError("Failed to generate token") from exc

    def verify(self, token: str) -> Identity:
        """
        Decode *token* and return the identity it carries.

        Raises:
            TokenExpired: If ``exp`` has passed (beyond the leeway).
            InvalidSignature: If the algorithm is outside the HMAC family,
                the signature does not verify, the token is malformed, or
                the identity claims are missing or invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=ALLOWED_ALGORITHMS,
                options={"require": REQUIRED_TOKEN_CLAIMS},
                leeway=self.leeway_seconds,
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected bearer token: %s", exc)
            raise InvalidSignature() from exc

        user_id = payload.get("user_id")
        email = payload.get("email")
        # bool is an int subclass; a True user_id must not pass as user 1
        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
            raise InvalidSignature()
        if not isinstance(email, str) or not email.strip():
            raise InvalidSignature()
        return Identity(user_id=user_id, email=email)
