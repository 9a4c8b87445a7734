"""
API tests for the task tracker.

Tests use the Flask test client and cover authentication, CRUD, ownership
isolation and the bulk mark-done endpoint.
"""
