"""Request-scoped authorization gate.

Extracts the access token from a request (cookie first, then the
``Authorization: Bearer`` header), verifies it and checks roles,
permissions or resource ownership. Framework code (FastAPI dependencies,
middleware) calls into this; it never talks HTTP responses itself.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable
from uuid import UUID

from agora_auth.exceptions import ForbiddenError, MissingTokenError, UnauthorizedError
from agora_auth.roles import Permission, UserRole, has_all_permissions, is_resource_owner
from agora_auth.schemas import TokenPayload, TokenType

if TYPE_CHECKING:
    from starlette.requests import Request

    from agora_auth.services.jwt_service import JWTService

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"


class AuthorizationGate:
    """
    Verifies the caller of a request.

    Invalid or missing credentials always fail as unauthorized (401); a
    forbidden (403) outcome is only possible for a verified identity.
    """

    def __init__(self, jwt_service: JWTService, cookie_name: str = ACCESS_TOKEN_COOKIE):
        self._jwt_service = jwt_service
        self._cookie_name = cookie_name

    def extract_token(self, request: Request) -> str | None:
        """Return the raw access token of the request, or None if absent."""
        cookie_token = request.cookies.get(self._cookie_name)
        if cookie_token:
            return cookie_token

        authorization = request.headers.get("authorization")
        if authorization:
            scheme, _, credentials = authorization.partition(" ")
            if scheme.lower() == "bearer" and credentials.strip():
                return credentials.strip()

        return None

    def require_auth(self, request: Request) -> TokenPayload:
        """
        Verify the request's access token.

        Raises
        ------
        MissingTokenError
            If the request carries no token
        InvalidTokenError
            If the token is malformed, badly signed or a refresh token
        TokenExpiredError
            If the token has expired
        ConfigError
            If the gate is misconfigured
        """
        token = self.extract_token(request)
        if token is None:
            logger.warning(
                "Auth failed (%s): %s %s",
                MissingTokenError.code.value,
                request.method,
                request.url.path,
            )
            raise MissingTokenError

        try:
            return self._jwt_service.verify_token(token, expected_type=TokenType.ACCESS)
        except UnauthorizedError as e:
            logger.warning(
                "Auth failed (%s): %s %s",
                e.code.value,
                request.method,
                request.url.path,
            )
            raise

    def require_role(
        self,
        request: Request,
        allowed_roles: Iterable[UserRole | str],
    ) -> TokenPayload:
        """
        Verify the request's access token and check the caller's role.

        Authentication runs first, so an invalid token is reported as
        unauthorized even when the role would not match either.

        Raises
        ------
        ForbiddenError
            If the verified role is not in ``allowed_roles``
        """
        payload = self.require_auth(request)
        allowed = {UserRole.parse(role) for role in allowed_roles}
        if payload.role not in allowed:
            logger.warning(
                "Access denied (%s): user %s with role %s on %s %s",
                ForbiddenError.code.value,
                payload.user_id,
                payload.role.value,
                request.method,
                request.url.path,
            )
            raise ForbiddenError
        return payload

    def require_permission(
        self,
        request: Request,
        permissions: Iterable[Permission],
    ) -> TokenPayload:
        """
        Verify the request's access token and check that the caller's role
        grants every permission in ``permissions``.

        Raises
        ------
        ForbiddenError
            If any permission is missing
        """
        payload = self.require_auth(request)
        required = frozenset(permissions)
        if not has_all_permissions(payload.role, required):
            logger.warning(
                "Access denied (%s): user %s with role %s lacks %s on %s %s",
                ForbiddenError.code.value,
                payload.user_id,
                payload.role.value,
                ",".join(sorted(p.value for p in required)),
                request.method,
                request.url.path,
            )
            raise ForbiddenError
        return payload

    def require_owner(self, request: Request, owner_id: UUID | str) -> TokenPayload:
        """Admit the owner of a resource, or an admin; others are forbidden."""
        payload = self.require_auth(request)
        if not is_resource_owner(payload, owner_id):
            logger.warning(
                "Access denied (%s): user %s does not own resource of %s",
                ForbiddenError.code.value,
                payload.user_id,
                owner_id,
            )
            raise ForbiddenError
        return payload

    def optional_auth(self, request: Request) -> TokenPayload | None:
        """
        Verify the request's access token if one is present.

        Returns None for anonymous or badly authenticated requests.
        Configuration errors are not swallowed.
        """
        try:
            return self.require_auth(request)
        except UnauthorizedError:
            return None
