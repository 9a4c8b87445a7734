"""
REST API endpoints for the task tracker.

Endpoints:
    GET    /api/health            - Service health check (public)
    POST   /api/register          - Create an account
    POST   /api/login             - Exchange credentials for a bearer token
    GET    /api/tasks             - List the caller's tasks (optional ?status=)
    POST   /api/tasks             - Create a task
    POST   /api/tasks/done        - Mark many tasks done concurrently
    GET    /api/tasks/<id>        - Retrieve one task
    PUT    /api/tasks/<id>        - Merge-update one task
    DELETE /api/tasks/<id>        - Delete one task

Handlers stay thin: they bind the request, call the service held in
``app.extensions["tracker"]`` and serialise the result.  Failures are
raised as ``TrackerError`` subclasses and rendered by the app-level error
handler as ``{"error": message}``.
"""

from __future__ import annotations

import logging
import os

from flask import Blueprint, Response, current_app, jsonify, request

from .. import Services
from ..auth import current_identity, parse_credentials, require_auth
from ..bulk import parse_task_ids
from ..tasks import parse_task_id

logger = logging.getLogger(__name__)

api_bp = Blueprint("tracker_api", __name__)


def _services() -> Services:
    return current_app.extensions["tracker"]


# =====================================================================
# Public Endpoints
# =====================================================================


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Liveness probe for load balancers and orchestrators."""
    return (
        jsonify(
            {
                "status": "healthy",
                "service": "tracker",
                "environment": os.getenv("ENVIRONMENT", "unknown"),
            }
        ),
        200,
    )


@api_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new account.

    Returns:
        201 on success, with no user data echoed back.
        400 for a malformed body, bad email or password length.
        409 if the email is already registered.
    """
    email, password = parse_credentials(request.get_json(silent=True))
    _services().auth.register(email, password)
    return jsonify({"message": "User registered successfully"}), 201


@api_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate and issue a bearer token.

    Returns:
        200 with ``token`` on success.
        400 for a malformed body.
        401 with a single generic message for unknown email or wrong
        password.
    """
    email, password = parse_credentials(request.get_json(silent=True))
    token = _services().auth.login(email, password)
    return jsonify({"message": "Login successful", "token": token}), 200


# =====================================================================
# Task Endpoints
# =====================================================================


@api_bp.route("/tasks", methods=["GET"])
@require_auth
def list_tasks() -> tuple[Response, int]:
    identity = current_identity()
    logger.info("GET /api/tasks - Fetching tasks for user_id=%s", identity.user_id)
    tasks = _services().tasks.list_for_owner(
        identity.user_id, status=request.args.get("status") or None
    )
    return jsonify({"tasks": [task.to_dict() for task in tasks], "count": len(tasks)}), 200


@api_bp.route("/tasks", methods=["POST"])
@require_auth
def create_task() -> tuple[Response, int]:
    task = _services().tasks.create(
        current_identity().user_id, request.get_json(silent=True)
    )
    return jsonify({"message": "Task created successfully", "task": task.to_dict()}), 201


@api_bp.route("/tasks/done", methods=["POST"])
@require_auth
def mark_tasks_done() -> tuple[Response, int]:
    """
    Mark several tasks as done in parallel.

    Expects a JSON array of task ids.  Responds 200 with one outcome per
    id, in no particular order, even when some ids fail; only a body that
    cannot be parsed as an id list is rejected outright.
    """
    task_ids = parse_task_ids(request.get_json(silent=True))
    outcomes = _services().bulk.mark_done(task_ids, current_identity().user_id)
    return jsonify([outcome.to_dict() for outcome in outcomes]), 200


@api_bp.route("/tasks/<task_id>", methods=["GET"])
@require_auth
def get_task(task_id: str) -> tuple[Response, int]:
    task = _services().tasks.get(parse_task_id(task_id), current_identity().user_id)
    return jsonify(task.to_dict()), 200


@api_bp.route("/tasks/<task_id>", methods=["PUT"])
@require_auth
def update_task(task_id: str) -> tuple[Response, int]:
    """
    Update a task.

    Only fields present and non-blank in the body change (merge semantics
    despite the PUT verb).
    """
    parsed_id = parse_task_id(task_id)
    task = _services().tasks.update(
        parsed_id, current_identity().user_id, request.get_json(silent=True)
    )
    return jsonify({"message": "Task updated successfully", "task": task.to_dict()}), 200


@api_bp.route("/tasks/<task_id>", methods=["DELETE"])
@require_auth
def delete_task(task_id: str) -> tuple[Response, int]:
    _services().tasks.delete(parse_task_id(task_id), current_identity().user_id)
    return jsonify({"message": "Task deleted successfully"}), 200


# =====================================================================
# Error Handlers
# =====================================================================


@api_bp.errorhandler(404)
def not_found(_: Exception) -> tuple[Response, int]:
    """Return a JSON 404 Not Found error."""
    return jsonify({"error": "Resource not found"}), 404


@api_bp.errorhandler(500)
def internal_error(error: Exception) -> tuple[Response, int]:
    """Log the exception and return a JSON 500 Internal Server Error."""
    logger.error("Internal server error: %s", error)
    return jsonify({"error": "Internal server error"}), 500
