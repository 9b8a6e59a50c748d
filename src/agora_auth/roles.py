"""Marketplace roles and the permissions granted to them."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Iterable, Union
from uuid import UUID

if TYPE_CHECKING:
    from agora_auth.schemas import TokenPayload


class UserRole(str, Enum):
    """Closed set of marketplace roles."""

    BUYER = "buyer"
    SELLER = "seller"
    VERIFIER = "verifier"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Union[str, "UserRole"]) -> "UserRole":
        """Normalize an external role string to a member.

        Legacy spellings from older clients are mapped onto the current
        roles; anything else raises ValueError.
        """
        if isinstance(value, UserRole):
            return value
        if not isinstance(value, str):
            msg = f"Role must be a string, got {type(value).__name__}"
            raise ValueError(msg)

        normalized = value.strip().lower()
        normalized = _ROLE_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            msg = f"Unknown role: {value!r}"
            raise ValueError(msg) from None


_ROLE_ALIASES = {
    "client": UserRole.BUYER.value,
    "user": UserRole.BUYER.value,
    "service_provider": UserRole.SELLER.value,
}

# Roles a user may pick for themselves at registration
SELF_REGISTRATION_ROLES = frozenset({UserRole.BUYER, UserRole.SELLER})


class Permission(str, Enum):
    # Products
    CREATE_PRODUCT = "create_product"
    EDIT_PRODUCT = "edit_product"
    DELETE_PRODUCT = "delete_product"
    VIEW_PRODUCT = "view_product"

    # Orders
    CREATE_ORDER = "create_order"
    MANAGE_ORDER = "manage_order"
    VIEW_ORDER = "view_order"

    # Verification
    CLAIM_VERIFICATION = "claim_verification"
    REVIEW_VERIFICATION = "review_verification"
    ASSIGN_VERIFICATION = "assign_verification"

    # Payments & settlements
    VIEW_PAYMENT = "view_payment"
    PROCESS_REFUND = "process_refund"
    VIEW_SETTLEMENT = "view_settlement"

    # Platform
    MANAGE_USERS = "manage_users"
    MANAGE_PLATFORM = "manage_platform"
    VIEW_ANALYTICS = "view_analytics"


ROLE_PERMISSIONS: dict[UserRole, frozenset[Permission]] = {
    UserRole.ADMIN: frozenset(Permission),
    UserRole.SELLER: frozenset(
        {
            Permission.CREATE_PRODUCT,
            Permission.EDIT_PRODUCT,
            Permission.DELETE_PRODUCT,
            Permission.VIEW_PRODUCT,
            Permission.MANAGE_ORDER,
            Permission.VIEW_ORDER,
            Permission.VIEW_PAYMENT,
            Permission.VIEW_SETTLEMENT,
            Permission.VIEW_ANALYTICS,
        }
    ),
    UserRole.VERIFIER: frozenset(
        {
            Permission.VIEW_PRODUCT,
            Permission.CLAIM_VERIFICATION,
            Permission.REVIEW_VERIFICATION,
            Permission.VIEW_SETTLEMENT,
        }
    ),
    UserRole.BUYER: frozenset(
        {
            Permission.VIEW_PRODUCT,
            Permission.CREATE_ORDER,
            Permission.VIEW_ORDER,
            Permission.VIEW_PAYMENT,
        }
    ),
}


def has_permission(role: UserRole, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def has_any_permission(role: UserRole, permissions: Iterable[Permission]) -> bool:
    return any(has_permission(role, p) for p in permissions)


def has_all_permissions(role: UserRole, permissions: Iterable[Permission]) -> bool:
    return all(has_permission(role, p) for p in permissions)


def is_resource_owner(payload: "TokenPayload", owner_id: Union[UUID, str]) -> bool:
    """True if the token holder owns the resource or is an admin."""
    if payload.role == UserRole.ADMIN:
        return True
    return str(payload.user_id) == str(owner_id)
