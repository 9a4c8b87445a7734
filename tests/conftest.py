"""
Shared pytest fixtures for the task tracker test suite.

Provides the Flask application, test client, per-test database, bearer
tokens and data factories used by the unit and integration suites.

Key Concepts Demonstrated:
- Session-scoped vs function-scoped fixtures
- Factory fixtures (user_factory, task_factory) built on Faker
- Table create/drop around every test for isolation
"""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest
from faker import Faker

# Set testing environment before importing the app
os.environ["FLASK_ENV"] = "testing"
os.environ["TEST_JWT_SECRET_KEY"] = (
    "test-jwt-secret-key-for-local-tests-0123456789-abcdefghijklmnopqrstuvwxyz"
)

from tests.helpers import auth_headers, create_test_token
from tracker_app import create_app, db
from tracker_app.models import Task, TaskStatus, User

fake = Faker()

DEFAULT_PASSWORD = "Passw0rd!"


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """
    Provide the Flask application for the whole test session.

    Built once with the 'testing' configuration so the factory is not
    re-run for every test.
    """
    application = create_app("testing")
    yield application


@pytest.fixture(scope="function")
def client(app):
    """Provide a fresh Flask test client for each test."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test.

    Tables are created before the test and dropped afterwards so no rows
    leak between tests.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def services(app):
    """The explicitly wired stores and services of the test app."""
    return app.extensions["tracker"]


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session, services) -> Callable[..., User]:
    """
    Factory that persists users with a real password hash.

    Example:
        def test_something(user_factory):
            user = user_factory(email="a@example.com")
    """

    def _create_user(
        email: str | None = None, password: str = DEFAULT_PASSWORD
    ) -> User:
        user = User(
            email=email or fake.unique.email(),
            password_hash=services.hasher.hash(password),
        )
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def task_factory(db_session) -> Callable[..., Task]:
    """Factory that inserts tasks with Faker defaults for a given owner."""

    def _create_task(
        *,
        user_id: int,
        title: str | None = None,
        description: str | None = None,
        status: str = TaskStatus.TODO.value,
    ) -> Task:
        task = Task(
            user_id=user_id,
            title=title or fake.sentence(nb_words=4),
            description=fake.paragraph() if description is None else description,
            status=status,
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def owner(user_factory) -> User:
    return user_factory(email="owner@example.com")


@pytest.fixture
def other_user(user_factory) -> User:
    return user_factory(email="other@example.com")


@pytest.fixture
def api_headers(app, owner) -> dict[str, str]:
    """Authorization + JSON headers for ``owner``."""
    return auth_headers(
        create_test_token(owner.id, owner.email, secret=app.config["JWT_SECRET_KEY"])
    )


@pytest.fixture
def other_user_headers(app, other_user) -> dict[str, str]:
    """Authorization + JSON headers for ``other_user``, for isolation tests."""
    return auth_headers(
        create_test_token(
            other_user.id, other_user.email, secret=app.config["JWT_SECRET_KEY"]
        )
    )


@pytest.fixture
def sample_task(task_factory, owner) -> Task:
    """A single task with predictable values owned by ``owner``."""
    return task_factory(
        user_id=owner.id,
        title="Sample Task",
        description="This is a sample task for testing",
        status=TaskStatus.TODO.value,
    )
