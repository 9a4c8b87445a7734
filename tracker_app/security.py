"""
Password hashing for the task tracker.

Wraps Werkzeug's password helpers with a fixed, configurable method.  The
default ``scrypt`` method is salted, memory-hard and adaptive; the work
factor is part of the method string and is stored inside every digest, so
raising it later does not invalidate existing hashes.
"""

from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from .errors import HashingError

logger = logging.getLogger(__name__)

DEFAULT_HASH_METHOD = "scrypt:32768:8:1"
SALT_LENGTH = 16


class PasswordHasher:
    """
    One-way salted password hashing with constant-time verification.

    Args:
        method: Werkzeug method string, e.g. ``"scrypt:32768:8:1"``.
    """

    def __init__(self, method: str = DEFAULT_HASH_METHOD) -> None:
        self.method = method

    def hash(self, plaintext: str) -> str:
        """
        Hash *plaintext* with a fresh random salt.

        Raises:
            HashingError: If the underlying primitive rejects the input or
                the configured method.
        """
        try:
            return generate_password_hash(
                plaintext, method=self.method, salt_length=SALT_LENGTH
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Password hashing failed with method %s: %s", self.method, exc)
            raise HashingError() from exc

    def verify(self, digest: str, plaintext: str) -> bool:
        """
        Check *plaintext* against a stored *digest*.

        Werkzeug compares with ``hmac.compare_digest``, so timing does not
        depend on how many characters match.
        """
        try:
            return check_password_hash(digest, plaintext)
        except (TypeError, ValueError) as exc:
            logger.warning("Password verification failed: %s", exc)
            raise HashingError() from exc
