"""
Routes package for the task tracker.

- api: REST API endpoints for registration, login and task management
"""
