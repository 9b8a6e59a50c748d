"""Shared pytest fixtures for all test suites."""

from tests.shared.fixtures.database import async_engine, db_session, session_maker
from tests.shared.fixtures.requests import make_request

__all__ = [
    "async_engine",
    "db_session",
    "make_request",
    "session_maker",
]
