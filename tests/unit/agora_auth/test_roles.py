"""Unit tests for roles and permissions."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from agora_auth.roles import (
    ROLE_PERMISSIONS,
    SELF_REGISTRATION_ROLES,
    Permission,
    UserRole,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_resource_owner,
)
from agora_auth.schemas import TokenPayload, TokenType


def _payload(role: UserRole, user_id=None) -> TokenPayload:
    return TokenPayload(
        user_id=user_id or uuid4(),
        email="a@example.com",
        role=role,
        exp=datetime(2100, 1, 1, tzinfo=timezone.utc),
        token_type=TokenType.ACCESS,
        jti="jti",
    )


class TestUserRoleParse:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("buyer", UserRole.BUYER),
            ("SELLER", UserRole.SELLER),
            (" verifier ", UserRole.VERIFIER),
            ("admin", UserRole.ADMIN),
            (UserRole.ADMIN, UserRole.ADMIN),
        ],
    )
    def test_known_roles(self, value, expected):
        assert UserRole.parse(value) == expected

    @pytest.mark.parametrize(
        ("alias", "expected"),
        [
            ("client", UserRole.BUYER),
            ("user", UserRole.BUYER),
            ("service_provider", UserRole.SELLER),
        ],
    )
    def test_legacy_aliases(self, alias, expected):
        assert UserRole.parse(alias) == expected

    @pytest.mark.parametrize("value", ["superuser", "", None, 1])
    def test_unknown_values_raise(self, value):
        with pytest.raises(ValueError):
            UserRole.parse(value)

    def test_only_buyer_and_seller_self_register(self):
        assert SELF_REGISTRATION_ROLES == {UserRole.BUYER, UserRole.SELLER}


class TestPermissions:
    def test_every_role_has_a_permission_set(self):
        assert set(ROLE_PERMISSIONS) == set(UserRole)

    def test_admin_has_everything(self):
        assert has_all_permissions(UserRole.ADMIN, list(Permission))

    def test_seller_manages_products(self):
        assert has_permission(UserRole.SELLER, Permission.CREATE_PRODUCT)
        assert not has_permission(UserRole.SELLER, Permission.MANAGE_USERS)

    def test_buyer_cannot_create_products(self):
        assert not has_permission(UserRole.BUYER, Permission.CREATE_PRODUCT)
        assert has_permission(UserRole.BUYER, Permission.CREATE_ORDER)

    def test_verifier_reviews_verifications(self):
        assert has_permission(UserRole.VERIFIER, Permission.REVIEW_VERIFICATION)

    def test_any_and_all(self):
        perms = [Permission.CREATE_ORDER, Permission.CREATE_PRODUCT]

        assert has_any_permission(UserRole.BUYER, perms)
        assert not has_all_permissions(UserRole.BUYER, perms)


class TestResourceOwnership:
    def test_owner_matches(self):
        user_id = uuid4()

        assert is_resource_owner(_payload(UserRole.SELLER, user_id), user_id)
        assert is_resource_owner(_payload(UserRole.SELLER, user_id), str(user_id))

    def test_other_user_is_not_owner(self):
        assert not is_resource_owner(_payload(UserRole.SELLER), uuid4())

    def test_admin_owns_everything(self):
        assert is_resource_owner(_payload(UserRole.ADMIN), uuid4())
