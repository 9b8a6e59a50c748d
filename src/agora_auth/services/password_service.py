"""Password hashing service using bcrypt.

Provides secure password hashing and verification with configurable
strength validation and transparent work-factor upgrades.
"""

import re
from functools import lru_cache

import bcrypt

from agora_auth.exceptions import WeakPasswordError

# bcrypt only looks at the first 72 bytes of the input
BCRYPT_MAX_BYTES = 72


@lru_cache(maxsize=8)
def _dummy_hash(rounds: int) -> str:
    return bcrypt.hashpw(b"agora-dummy-password", bcrypt.gensalt(rounds=rounds)).decode()


class PasswordHashingService:
    """Service for secure password hashing and verification.

    Uses bcrypt for password hashing with configurable work factor.
    Also provides password strength validation.

    Examples
    --------
    >>> service = PasswordHashingService()
    >>> hash = service.hash("Secret123!")
    >>> service.verify("Secret123!", hash)
    True
    >>> service.verify("wrong_password", hash)
    False
    """

    # Password requirements
    MIN_LENGTH = 8

    def __init__(self, rounds: int = 12, require_complexity: bool = True):
        """Initialize the password hashing service.

        Parameters
        ----------
        rounds
            The bcrypt work factor (log2 of iterations). Default is 12.
            Existing hashes below this factor are reported by
            ``needs_rehash`` so they can be upgraded on next login.
        require_complexity
            Whether passwords must mix upper/lower case, digits and
            special characters.
        """
        self._rounds = rounds
        self._require_complexity = require_complexity

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Strength is not checked here; call ``validate_strength`` first when
        accepting a new password.

        Parameters
        ----------
        password
            The plaintext password to hash

        Returns
        -------
        The bcrypt hash as a string
        """
        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Verify a password against a hash.

        Parameters
        ----------
        password
            The plaintext password to check
        password_hash
            The bcrypt hash to verify against

        Returns
        -------
        True if password matches, False otherwise (including malformed
        hashes and empty input)
        """
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError):
            # Invalid hash format or oversized input
            return False

    def verify_dummy(self, password: str) -> bool:
        """Run a full bcrypt check against a throwaway hash.

        Used when no real hash exists (unknown email, OAuth-only account)
        so that failed logins take the same time either way. Always False.
        """
        self.verify(password or "x", _dummy_hash(self._rounds))
        return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if a password hash needs to be rehashed.

        After raising the rounds setting, hashes produced with a lower work
        factor are identified here and upgraded on next successful login.

        Parameters
        ----------
        password_hash
            The existing hash to check

        Returns
        -------
        True if the hash should be regenerated
        """
        try:
            # bcrypt format: $2b$XX$...
            parts = password_hash.split("$")
            if len(parts) >= 4:
                return int(parts[2]) < self._rounds
        except (ValueError, AttributeError):
            pass
        return True

    def validate_strength(self, password: str) -> None:
        """Validate that a password meets strength requirements.

        Parameters
        ----------
        password
            The password to validate

        Raises
        ------
        WeakPasswordError
            If password doesn't meet requirements; ``errors`` lists every
            rule that failed
        """
        if not password:
            msg = "Password cannot be empty"
            raise WeakPasswordError(msg)

        errors: list[str] = []

        if len(password) < self.MIN_LENGTH:
            errors.append(f"Password must be at least {self.MIN_LENGTH} characters")

        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            errors.append(f"Password cannot exceed {BCRYPT_MAX_BYTES} bytes")

        if self._require_complexity:
            if not re.search(r"[A-Z]", password):
                errors.append("Password must contain at least one uppercase letter")
            if not re.search(r"[a-z]", password):
                errors.append("Password must contain at least one lowercase letter")
            if not re.search(r"[0-9]", password):
                errors.append("Password must contain at least one number")
            if not re.search(r"[^A-Za-z0-9]", password):
                errors.append("Password must contain at least one special character")

        if errors:
            raise WeakPasswordError(errors[0], errors=errors)
