"""SQLAlchemy model for marketplace users.

This model stores identity, role and the password hash.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from agora_auth.persistence.sqlalchemy.base import AuthBase
from agora_auth.shared.time import utc_now


class UserModel(AuthBase):
    """
    SQLAlchemy model for users.

    Table: users
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )

    # Stored normalized (lower-case, stripped)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # bcrypt format, ~60 chars; NULL for OAuth-only accounts
    password_hash: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="buyer",
    )

    email_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<UserModel(id={self.id}, email={self.email}, role={self.role})>"
