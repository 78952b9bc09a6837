"""
auth_service tests

Covers the credential service package:

- HTTP endpoints and envelopes (`test_auth.py`)
- Credential and session operations (`test_service.py`)
- Store handle and table creation (`test_db_init.py`)
- Settings, health checks and the auth event log

Each test runs against its own in-memory SQLite store.
"""
