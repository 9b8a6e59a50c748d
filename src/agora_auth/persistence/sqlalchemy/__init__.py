"""SQLAlchemy implementation for agora_auth persistence.

Provides:
- AuthBase: Declarative base for auth models
- UserModel / RefreshSessionModel / OneTimeTokenModel: SQLAlchemy models
- UserRepositorySQLAlchemy / RefreshSessionRepositorySQLAlchemy /
  OneTimeTokenRepositorySQLAlchemy

Note: The consuming application should include AuthBase.metadata
in its migrations to create the users, refresh_sessions and
one_time_tokens tables.
"""

from agora_auth.persistence.sqlalchemy.base import AuthBase
from agora_auth.persistence.sqlalchemy.models import (
    OneTimeTokenModel,
    RefreshSessionModel,
    UserModel,
)
from agora_auth.persistence.sqlalchemy.repositories import (
    OneTimeTokenRepositorySQLAlchemy,
    RefreshSessionRepositorySQLAlchemy,
    UserRepositorySQLAlchemy,
)

__all__ = [
    "AuthBase",
    "OneTimeTokenModel",
    "OneTimeTokenRepositorySQLAlchemy",
    "RefreshSessionModel",
    "RefreshSessionRepositorySQLAlchemy",
    "UserModel",
    "UserRepositorySQLAlchemy",
]
