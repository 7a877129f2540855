"""Integration tests for the vote API.

These tests talk to a running API backed by a real PostgreSQL instance and
are deselected by default. Run them with:

    API_BASE_URL=http://localhost:8080 pytest -m docker
"""
