"""
Integration tests for the registration, login and health endpoints.

Key Concepts Demonstrated:
- Full HTTP request/response cycle through the Flask test client
- Status-code assertions (200, 201, 400, 401, 409)
- Parametrised input validation
"""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration


def _credentials(email: str = "new_user@example.com", password: str = "Passw0rd!") -> dict:
    return {"email": email, "password": password}


def test_health_check_is_public(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"
    assert response.get_json()["service"] == "tracker"


@pytest.mark.security
def test_register_success_echoes_no_sensitive_data(client, db_session):
    """Test that registration returns 201 without the password or its hash."""
    # Act
    response = client.post("/api/register", json=_credentials())

    # Assert
    assert response.status_code == 201
    body = response.get_json()
    assert body == {"message": "User registered successfully"}


def test_register_duplicate_email_returns_409(client, db_session):
    # Arrange
    client.post("/api/register", json=_credentials(email="taken@example.com"))

    # Act
    response = client.post(
        "/api/register", json=_credentials(email="taken@example.com", password="Another12")
    )

    # Assert
    assert response.status_code == 409
    assert response.get_json() == {"error": "Email already exists"}


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"email": "bad-email", "password": "Passw0rd!"}, "Invalid email"),
        ({"email": "a@example.com", "password": "short"}, "Invalid password"),
        ({"email": "a@example.com", "password": "thirteenchars"}, "Invalid password"),
        ({"email": "a@example.com"}, "Invalid inputs"),
        ({"password": "Passw0rd!"}, "Invalid inputs"),
        ({"email": 42, "password": "Passw0rd!"}, "Invalid inputs"),
    ],
)
def test_register_invalid_input_returns_400(client, db_session, payload, message):
    response = client.post("/api/register", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"].startswith(message)


def test_register_non_json_body_returns_400(client, db_session):
    response = client.post("/api/register", data="email=a", content_type="text/plain")

    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid inputs"}


def test_login_success_returns_token(client, db_session, services):
    # Arrange
    client.post("/api/register", json=_credentials(email="login@example.com"))

    # Act
    response = client.post("/api/login", json=_credentials(email="login@example.com"))

    # Assert
    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "Login successful"
    assert services.tokens.verify(body["token"]).email == "login@example.com"


@pytest.mark.security
def test_login_unknown_email_and_wrong_password_are_indistinguishable(client, db_session):
    """Test that both login failures return the same status and body."""
    # Arrange
    client.post("/api/register", json=_credentials(email="known@example.com"))

    # Act
    unknown = client.post("/api/login", json=_credentials(email="nobody@example.com"))
    wrong = client.post(
        "/api/login", json=_credentials(email="known@example.com", password="WrongPas1")
    )

    # Assert
    assert unknown.status_code == wrong.status_code == 401
    assert unknown.get_json() == wrong.get_json() == {"error": "Invalid email or password"}


def test_repeated_wrong_password_never_locks_out(client, db_session):
    """Test that failed logins do not lock the account."""
    # Arrange
    client.post("/api/register", json=_credentials(email="retry@example.com"))

    # Act
    first = client.post("/api/login", json=_credentials(email="retry@example.com", password="Wrong123"))
    second = client.post("/api/login", json=_credentials(email="retry@example.com", password="Wrong123"))
    correct = client.post("/api/login", json=_credentials(email="retry@example.com"))

    # Assert
    assert first.status_code == second.status_code == 401
    assert correct.status_code == 200


def test_login_malformed_body_returns_400(client, db_session):
    response = client.post("/api/login", json=["email", "password"])

    assert response.status_code == 400


def test_register_then_use_token_end_to_end(client, db_session):
    """Test the full flow: register, log in, create and read a task."""
    # Arrange
    client.post("/api/register", json=_credentials(email="flow@example.com"))
    token = client.post("/api/login", json=_credentials(email="flow@example.com")).get_json()[
        "token"
    ]
    headers = {"Authorization": f"Bearer {token}"}

    # Act
    created = client.post(
        "/api/tasks", json={"title": "First task", "status": "todo"}, headers=headers
    )
    fetched = client.get(f"/api/tasks/{created.get_json()['task']['id']}", headers=headers)

    # Assert
    assert created.status_code == 201
    assert fetched.status_code == 200
    assert fetched.get_json()["title"] == "First task"
