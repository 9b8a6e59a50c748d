"""SQLAlchemy declarative base for agora_auth models.

The consuming application should include AuthBase.metadata in its
migration configuration (or call ``create_all`` on it at startup).

Examples
--------
# In Alembic env.py:
from agora_auth.persistence.sqlalchemy import AuthBase

target_metadata = AuthBase.metadata
"""

from sqlalchemy.orm import DeclarativeBase


class AuthBase(DeclarativeBase):
    """Declarative base for agora_auth models."""
