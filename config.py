"""
Configuration for the task tracker API.

Defines environment-aware configuration classes: a shared ``Config`` base
holds defaults and ``DevelopmentConfig``, ``TestingConfig`` and
``ProductionConfig`` override only what differs.  ``get_config`` resolves
the class at runtime from an explicit name or the ``FLASK_ENV`` variable.

Every value can be overridden through an environment variable so the same
code can be deployed anywhere by changing the environment alone.
"""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

DEV_JWT_SECRET = "tracker-dev-jwt-secret-change-in-production-0123456789"


def load_jwt_secret(*, testing: bool, development: bool) -> str:
    """
    Resolve the HMAC secret used to sign and verify bearer tokens.

    In testing mode ``TEST_JWT_SECRET_KEY`` wins when set.  Development
    falls back to an insecure built-in secret; every other environment
    must supply ``JWT_SECRET_KEY`` explicitly.
    """
    if testing:
        test_secret = os.environ.get("TEST_JWT_SECRET_KEY", "").strip()
        if test_secret:
            return test_secret

    secret = os.environ.get("JWT_SECRET_KEY", "").strip()
    if secret:
        return secret
    if development or testing:
        return DEV_JWT_SECRET

    raise RuntimeError("Missing JWT configuration: set JWT_SECRET_KEY.")


class Config:
    """
    Base configuration shared by all environments.

    Attributes:
        SECRET_KEY: Flask signing key.
        SQLALCHEMY_DATABASE_URI: Database connection string (default: local
            SQLite file).
        JWT_EXPIRY_HOURS: Lifetime of a freshly issued token.
        JWT_CLOCK_SKEW_SECONDS: Allowed drift when checking ``exp``.
        PASSWORD_HASH_METHOD: Werkzeug hash method string with its fixed
            work factor.
        BULK_MAX_WORKERS: Upper bound on threads used by one bulk update.
    """

    SECRET_KEY: str = os.environ.get(
        "SECRET_KEY", "tracker-dev-secret-change-in-production"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'tracker.db'}?check_same_thread=False",
    )

    JWT_EXPIRY_HOURS: int = int(os.environ.get("JWT_EXPIRY_HOURS", "1"))
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "30"))

    PASSWORD_HASH_METHOD: str = os.environ.get(
        "PASSWORD_HASH_METHOD", "scrypt:32768:8:1"
    )

    BULK_MAX_WORKERS: int = int(os.environ.get("BULK_MAX_WORKERS", "32"))


class DevelopmentConfig(Config):
    """Local development: debug on, testing off."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """
    Configuration for the automated test suite.

    Uses a separate SQLite file so test runs never touch development data.
    ``check_same_thread=False`` lets the bulk updater's worker threads share
    the pooled connections.  The password hash cost is lowered to keep the
    suite fast; the algorithm stays the same.
    """

    DEBUG: bool = True
    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'test_tracker.db'}?check_same_thread=False",
    )
    SQLALCHEMY_ENGINE_OPTIONS: dict = {"pool_pre_ping": True}
    PASSWORD_HASH_METHOD: str = "scrypt:1024:8:1"


class ProductionConfig(Config):
    """
    Production deployments.

    All secrets must come from the environment; the defaults in ``Config``
    are insecure on purpose.
    """

    DEBUG: bool = False
    TESTING: bool = False


config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Resolve a configuration class by environment name.

    Args:
        env: One of ``"development"``, ``"testing"`` or ``"production"``.
            When ``None``, ``FLASK_ENV`` is consulted, falling back to
            ``"development"``.

    Returns:
        The configuration class (not an instance).  Unknown names resolve
        to ``DevelopmentConfig``.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
