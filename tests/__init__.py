"""
SiegeStats Test Suite
=====================

Test Organization
-----------------
- tests/unit/          : Fast unit tests with fakes and mocks (no external services)
- tests/integration/   : Real SQL document store and Redis (SQLite, testcontainers)

Run ``pytest -m "not integration"`` for the fast suite only.
"""
