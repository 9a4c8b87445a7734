"""
Test suite for the task tracker.

- unit/: services, token and hashing logic without the HTTP layer
- integration/: full request/response cycle through the Flask test client
"""
