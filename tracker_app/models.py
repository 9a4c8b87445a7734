"""
Database models for the task tracker.

Defines the SQLAlchemy ORM models for registered users and their tasks,
plus the ``TaskStatus`` enumeration.  Every task belongs to exactly one
user through ``user_id``; all task queries filter on it so users only ever
see their own rows.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from . import db


def _to_utc_iso(value: datetime | None) -> str | None:
    """
    Serialize a datetime to an ISO-8601 UTC string.

    SQLite does not store timezone information, so values read back may be
    naive even though they were written in UTC.  Naive values are assumed
    to be UTC; aware values are converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat()


class TaskStatus(str, Enum):
    """
    Lifecycle status of a task.

    Inherits from ``str`` so members compare equal to the raw strings stored
    in the database and serialise directly to JSON.
    """

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]


class User(db.Model):
    """
    A registered account.

    Only a one-way hash of the password is stored.  ``to_dict`` leaves the
    hash out so it can be returned in API responses.

    Attributes:
        id: Auto-incrementing primary key.
        email: Unique login identifier, matched exactly (case-sensitive).
        password_hash: Werkzeug-generated salted hash.
        created_at: Account creation time, UTC.
    """

    __tablename__ = "users"

    __table_args__ = (
        db.CheckConstraint("length(email) <= 120", name="ck_users_email_len"),
    )

    id: int = db.Column(db.Integer, primary_key=True)
    # Indexed because registration and login both look users up by email
    email: str = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "created_at": _to_utc_iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class Task(db.Model):
    """
    Task owned by a single user.

    Attributes:
        id: Auto-incrementing primary key.
        user_id: Owning user.  Never changes after creation.
        title: Short non-blank summary (max 200 characters).
        description: Free text, may be empty.
        status: One of ``TaskStatus``.
        created_at: Creation time, UTC.
        updated_at: Last modification time, UTC.
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    title: str = db.Column(db.String(200), nullable=False)
    description: str = db.Column(db.Text, nullable=False, default="")
    status: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskStatus.TODO.value,
    )
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialise the task to a JSON-safe dictionary.

        Returns:
            All task fields, with datetimes as UTC ISO-8601 strings.
        """
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "created_at": _to_utc_iso(self.created_at),
            "updated_at": _to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
