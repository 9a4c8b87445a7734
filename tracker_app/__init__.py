"""
Task tracker Flask application factory.

``create_app`` wires configuration, the SQLAlchemy extension, the stores
and the core services together.  The stores and services are constructed
explicitly here and kept in a ``Services`` container on
``app.extensions["tracker"]``; route handlers fetch them from there rather
than from module-level globals.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from flask import Flask, Response, jsonify
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import sessionmaker

from config import get_config, load_jwt_secret

if TYPE_CHECKING:
    from .auth import AuthPipeline
    from .bulk import BulkStatusUpdater
    from .jwt import TokenService
    from .security import PasswordHasher
    from .stores import TaskStore, UserStore
    from .tasks import TaskService

db = SQLAlchemy()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    """Collaborators shared by every request of one application."""

    users: UserStore
    tasks_store: TaskStore
    hasher: PasswordHasher
    tokens: TokenService
    auth: AuthPipeline
    tasks: TaskService
    bulk: BulkStatusUpdater


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def _build_services(app: Flask) -> Services:
    from .auth import AuthPipeline
    from .bulk import BulkStatusUpdater
    from .jwt import TokenService
    from .security import PasswordHasher
    from .stores import TaskStore, UserStore
    from .tasks import TaskService

    # expire_on_commit=False keeps returned rows readable after their
    # session closes; the stores hand out detached objects.
    session_factory = sessionmaker(bind=db.engine, expire_on_commit=False)
    users = UserStore(session_factory)
    task_store = TaskStore(session_factory)
    hasher = PasswordHasher(app.config["PASSWORD_HASH_METHOD"])
    tokens = TokenService(
        app.config["JWT_SECRET_KEY"],
        expiry=timedelta(hours=int(app.config["JWT_EXPIRY_HOURS"])),
        leeway_seconds=int(app.config["JWT_CLOCK_SKEW_SECONDS"]),
    )
    return Services(
        users=users,
        tasks_store=task_store,
        hasher=hasher,
        tokens=tokens,
        auth=AuthPipeline(users, hasher, tokens),
        tasks=TaskService(task_store),
        bulk=BulkStatusUpdater(task_store, max_workers=int(app.config["BULK_MAX_WORKERS"])),
    )


def _register_error_handlers(app: Flask) -> None:
    from .errors import InternalError, TrackerError

    @app.errorhandler(TrackerError)
    def handle_tracker_error(error: TrackerError) -> tuple[Response, int]:
        if isinstance(error, InternalError):
            logger.error("Internal error: %r", error.__cause__ or error)
        return jsonify({"error": error.message}), error.status_code


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the task tracker application.

    Args:
        config_name: ``"development"``, ``"testing"`` or ``"production"``.
            When ``None``, ``FLASK_ENV`` decides, defaulting to
            ``"development"``.

    Returns:
        A configured Flask application with tables created and services
        registered.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    app.config["JWT_SECRET_KEY"] = load_jwt_secret(
        testing=bool(app.config.get("TESTING")),
        development=bool(app.config.get("DEBUG")),
    )

    logger.info("Creating tracker app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    db.init_app(app)

    from .routes.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    _register_error_handlers(app)

    with app.app_context():
        db.create_all()
        logger.info("Tracker database tables created")
        app.extensions["tracker"] = _build_services(app)

    return app
