"""Abstract repository interface for user records.

This interface defines the contract for credential persistence.
Implementations can use SQLAlchemy or any other storage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from agora_auth.roles import UserRole


@dataclass(frozen=True)
class UserData:
    """Immutable user record returned by repository.

    ``password_hash`` is None for accounts that only sign in through an
    external identity provider.
    """

    id: UUID
    email: str
    password_hash: str | None
    role: UserRole
    name: str | None
    email_verified: bool
    created_at: datetime
    updated_at: datetime


class UserRepository(ABC):
    """
    Abstract repository interface for marketplace users.

    Implementations must provide methods for:
    - Creating users at registration
    - Finding users by ID or (normalized) email
    - Replacing password hashes (password change, reset, rehash on login)
    - Marking email addresses verified
    """

    @abstractmethod
    async def create(
        self,
        email: str,
        password_hash: str | None,
        role: UserRole,
        name: str | None = None,
        email_verified: bool = False,
    ) -> UserData:
        """
        Create a new user.

        Parameters
        ----------
        email
            Normalized email address (must be unique)
        password_hash
            The bcrypt password hash, or None for OAuth-only accounts
        role
            The user's marketplace role
        name
            Optional display name
        email_verified
            Whether the address is already verified

        Returns
        -------
        The created user
        """

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> UserData | None:
        """Find a user by ID, None if it does not exist."""

    @abstractmethod
    async def find_by_email(self, email: str) -> UserData | None:
        """Find a user by normalized email, None if it does not exist."""

    @abstractmethod
    async def update_password_hash(self, user_id: UUID, password_hash: str) -> bool:
        """
        Replace the stored password hash.

        Returns
        -------
        True if the user exists and was updated
        """

    @abstractmethod
    async def mark_email_verified(self, user_id: UUID) -> bool:
        """
        Flag the user's email address as verified.

        Returns
        -------
        True if the user exists
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of registered users."""
