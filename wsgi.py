"""WSGI entry point for the task tracker."""

import os

from tracker_app import create_app

app = create_app(os.getenv("FLASK_ENV", "production"))
