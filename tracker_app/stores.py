"""
Persistence for users and tasks.

``UserStore`` and ``TaskStore`` are built once by the application factory
around a SQLAlchemy ``sessionmaker`` and handed to the components that need
them.  Each call opens its own short-lived session and commits or rolls
back before returning, so a single store instance can be used from many
threads at once; the engine's connection pool does the serialising.

Driver failures are logged here with full detail and re-raised as
``StoreError``, whose client-facing message is generic.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import Conflict, StoreError
from .models import Task, User

logger = logging.getLogger(__name__)


@contextmanager
def _transaction(
    session_factory: sessionmaker,
    operation: str,
    conflict_message: str | None = None,
) -> Iterator[Session]:
    """
    Run one unit of work in its own transaction, translating driver errors.

    A unique-constraint violation becomes ``Conflict`` when the caller names
    one with *conflict_message*; every other driver error is a ``StoreError``.
    """
    try:
        with session_factory.begin() as session:
            yield session
    except IntegrityError as exc:
        if conflict_message is None:
            logger.warning("Store operation %s violated a constraint: %s", operation, exc)
            raise StoreError() from exc
        logger.info("Store operation %s rejected by unique constraint", operation)
        raise Conflict(conflict_message) from exc
    except SQLAlchemyError as exc:
        logger.warning("Store operation %s failed: %s", operation, exc)
        raise StoreError() from exc


class UserStore:
    """Credential store: lookup by email and insert."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get_by_email(self, email: str) -> User | None:
        with _transaction(self._session_factory, "get_user_by_email") as session:
            return session.scalar(select(User).where(User.email == email))

    def insert(self, user: User) -> User:
        """
        Persist a new user and return it with its assigned id.

        Raises:
            Conflict: If the email is already taken (unique constraint).
        """
        with _transaction(
            self._session_factory, "insert_user", conflict_message="Email already exists"
        ) as session:
            session.add(user)
        return user


class TaskStore:
    """
    Task store: insert, get, update, delete and list by owner.

    Returned ``Task`` objects are detached from any session; their loaded
    attributes stay readable because sessions do not expire on commit.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def insert(self, task: Task) -> Task:
        with _transaction(self._session_factory, "insert_task") as session:
            session.add(task)
        return task

    def get_by_id(self, task_id: int) -> Task | None:
        with _transaction(self._session_factory, "get_task") as session:
            return session.get(Task, task_id)

    def update(self, task: Task) -> Task | None:
        """
        Write the task's title, description and status back by id.

        Returns:
            The stored row after the update, or ``None`` if the row no
            longer exists.
        """
        with _transaction(self._session_factory, "update_task") as session:
            stored = session.get(Task, task.id)
            if stored is None:
                return None
            stored.title = task.title
            stored.description = task.description
            stored.status = task.status
            session.flush()
            return stored

    def delete(self, task_id: int, owner_id: int) -> bool:
        """Delete the owner's task; ``False`` when no matching row existed."""
        with _transaction(self._session_factory, "delete_task") as session:
            result = session.execute(
                delete(Task).where(Task.id == task_id, Task.user_id == owner_id)
            )
            return result.rowcount > 0

    def list_by_owner(self, owner_id: int, status: str | None = None) -> list[Task]:
        stmt = select(Task).where(Task.user_id == owner_id)
        if status:
            stmt = stmt.where(Task.status == status)
        with _transaction(self._session_factory, "list_tasks") as session:
            return list(session.scalars(stmt.order_by(Task.id)).all())
