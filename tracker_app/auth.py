"""
Registration, login and request authentication.

``AuthPipeline`` orchestrates the password hasher, the token service and
the credential store.  ``require_auth`` protects task endpoints: it
verifies the bearer token and stores a typed ``Identity`` on ``flask.g``
for the duration of the request.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import current_app, g, request

from .errors import Conflict, InvalidInput, Unauthorized, UnknownEmail, WrongPassword
from .jwt import Identity, TokenService, extract_bearer_token
from .models import User
from .security import PasswordHasher
from .stores import UserStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 12
EMAIL_MAX_LENGTH = 120


def is_valid_email(email: str) -> bool:
    return len(email) <= EMAIL_MAX_LENGTH and EMAIL_PATTERN.match(email) is not None


def is_valid_password(password: str) -> bool:
    """Password length must fall in the closed range 8..12."""
    return PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH


def parse_credentials(data: Any) -> tuple[str, str]:
    """
    Pull ``(email, password)`` out of a decoded JSON body.

    Raises:
        InvalidInput: If the body is not an object or either field is not
            a string.
    """
    if not isinstance(data, dict):
        raise InvalidInput("Invalid inputs")
    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not isinstance(password, str):
        raise InvalidInput("Invalid inputs")
    return email, password


class AuthPipeline:
    """
    Registration and login over explicit collaborators.

    Args:
        users: Credential store.
        hasher: Password hasher.
        tokens: Token service used to issue tokens on login.
    """

    def __init__(
        self, users: UserStore, hasher: PasswordHasher, tokens: TokenService
    ) -> None:
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    def register(self, email: str, password: str) -> User:
        """
        Create an account for *email*.

        The duplicate check runs before hashing so a taken email costs no
        hashing work.

        Raises:
            InvalidInput: Bad email format or password length.
            Conflict: Email already registered.
            HashingError, StoreError: Server-side failures.
        """
        if len(email) > EMAIL_MAX_LENGTH:
            raise InvalidInput(
                f"Invalid email. It exceeds the {EMAIL_MAX_LENGTH}-character column limit"
            )
        if not is_valid_email(email):
            raise InvalidInput("Invalid email")
        if not is_valid_password(password):
            raise InvalidInput(
                "Invalid password. The length must be between "
                f"{PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters"
            )

        if self.users.get_by_email(email) is not None:
            raise Conflict("Email already exists")

        user = User(email=email, password_hash=self.hasher.hash(password))
        user = self.users.insert(user)
        logger.info("Registered user_id=%s", user.id)
        return user

    def login(self, email: str, password: str) -> str:
        """
        Check credentials and return a fresh bearer token.

        Unknown email and wrong password raise different ``Unauthorized``
        subclasses so the reason can be logged, but both carry the same
        client-facing message.
        """
        user = self.users.get_by_email(email)
        if user is None:
            logger.info("Login failed: %s", UnknownEmail.reason)
            raise UnknownEmail()

        if not self.hasher.verify(user.password_hash, password):
            logger.info("Login failed for user_id=%s: %s", user.id, WrongPassword.reason)
            raise WrongPassword()

        return self.tokens.issue(user.id, user.email)


def current_identity() -> Identity:
    """Return the identity stored by ``require_auth`` for this request."""
    return g.identity


def require_auth(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that enforces bearer-token authentication.

    A missing header, another scheme or an empty token is rejected with
    ``Unauthorized`` before the token service is consulted.  On success the
    verified ``Identity`` is stored on ``g.identity``.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        token = extract_bearer_token(request.headers.get("Authorization"))
        if token is None:
            raise Unauthorized("Missing token")

        tokens: TokenService = current_app.extensions["tracker"].tokens
        g.identity = tokens.verify(token)
        return view_func(*args, **kwargs)

    return wrapper
