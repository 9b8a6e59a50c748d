"""HS256 access and refresh tokens.

Both token kinds carry the same identity claims; the ``type`` claim keeps
one from being accepted where the other is expected.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import jwt

from agora_auth.exceptions import ConfigError, InvalidTokenError, TokenExpiredError
from agora_auth.roles import UserRole
from agora_auth.schemas import TokenPayload, TokenType

_REQUIRED_CLAIMS = ["sub", "email", "role", "type", "jti", "exp"]


class JWTService:
    """Issues and verifies signed tokens for marketplace users.

    Examples
    --------
    >>> service = JWTService(secret_key=settings.jwt_secret_key.get_secret_value())
    >>> token = service.create_access_token(user_id, "user@example.com", UserRole.BUYER)
    >>> payload = service.verify_token(token, expected_type=TokenType.ACCESS)
    >>> payload.role
    <UserRole.BUYER: 'buyer'>
    """

    DEFAULT_ACCESS_EXPIRE_MINUTES = 15
    DEFAULT_REFRESH_EXPIRE_DAYS = 7
    ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        access_token_expire_minutes: int = DEFAULT_ACCESS_EXPIRE_MINUTES,
        refresh_token_expire_days: int = DEFAULT_REFRESH_EXPIRE_DAYS,
    ):
        """
        Parameters
        ----------
        secret_key
            HMAC signing secret shared by every API process
        access_token_expire_minutes
            Minutes until access token expires (default 15)
        refresh_token_expire_days
            Days until refresh token expires (default 7)

        Raises
        ------
        ConfigError
            If no secret key is configured
        """
        if not secret_key:
            msg = "JWT secret key cannot be empty"
            raise ConfigError(msg)

        self._secret_key = secret_key
        self._access_expire = timedelta(minutes=access_token_expire_minutes)
        self._refresh_expire = timedelta(days=refresh_token_expire_days)

    @property
    def access_expire(self) -> timedelta:
        return self._access_expire

    @property
    def refresh_expire(self) -> timedelta:
        return self._refresh_expire

    def create_access_token(
        self,
        user_id: UUID,
        email: str,
        role: UserRole,
        name: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Issue the token presented on every authenticated request.

        Parameters
        ----------
        user_id
            Subject of the token
        email
            The user's email address
        role
            The user's marketplace role
        name
            Optional display name
        expires_delta
            Lifetime override; defaults to the configured access lifetime

        Returns
        -------
        The encoded JWT token string
        """
        return self._create_token(
            user_id=user_id,
            email=email,
            role=role,
            name=name,
            token_type=TokenType.ACCESS,
            expires_delta=expires_delta or self._access_expire,
        )

    def create_refresh_token(
        self,
        user_id: UUID,
        email: str,
        role: UserRole,
        name: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Issue the token exchanged for new access tokens.

        It is only honoured while a matching refresh session is stored.

        Returns
        -------
        The encoded JWT token string
        """
        return self._create_token(
            user_id=user_id,
            email=email,
            role=role,
            name=name,
            token_type=TokenType.REFRESH,
            expires_delta=expires_delta or self._refresh_expire,
        )

    def verify_token(
        self,
        token: str,
        expected_type: TokenType | None = None,
    ) -> TokenPayload:
        """Check signature, expiry and claims, then decode.

        Parameters
        ----------
        token
            Encoded token as received from the client
        expected_type
            If given, tokens of the other type are rejected

        Returns
        -------
        The decoded claims

        Raises
        ------
        TokenExpiredError
            If the signature is valid but the token is past its expiry
        InvalidTokenError
            If token is malformed, badly signed, or of the wrong type
        """
        if not token or not isinstance(token, str):
            msg = "Token is empty"
            raise InvalidTokenError(msg)

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                options={"require": _REQUIRED_CLAIMS},
            )

            decoded = TokenPayload(
                user_id=UUID(payload["sub"]),
                email=payload["email"],
                role=UserRole.parse(payload["role"]),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                token_type=TokenType(payload["type"]),
                jti=str(payload["jti"]),
                name=payload.get("name"),
            )

        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError from e
        except jwt.InvalidTokenError as e:
            msg = f"Invalid token: {e}"
            raise InvalidTokenError(msg) from e
        except (KeyError, ValueError, TypeError) as e:
            msg = f"Malformed token payload: {e}"
            raise InvalidTokenError(msg) from e

        if expected_type is not None and decoded.token_type != expected_type:
            msg = f"Expected {expected_type.value} token, got {decoded.token_type.value}"
            raise InvalidTokenError(msg)

        return decoded

    def _create_token(
        self,
        user_id: UUID,
        email: str,
        role: UserRole,
        name: str | None,
        token_type: TokenType,
        expires_delta: timedelta,
    ) -> str:
        now = datetime.now(tz=timezone.utc)
        expire = now + expires_delta

        payload = {
            "sub": str(user_id),
            "email": email,
            "role": UserRole.parse(role).value,
            "type": token_type.value,
            "jti": uuid4().hex,
            "iat": now,
            "exp": expire,
        }
        if name:
            payload["name"] = name

        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)
