"""Tests for the user management predicate."""

import pytest

from src.database.models import MANAGEMENT_ROLES, UserRole, can_manage_users


@pytest.mark.parametrize(
    "role, expected",
    [
        (UserRole.OWNER, True),
        (UserRole.ADMIN, True),
        (UserRole.PICKER, False),
    ],
)
def test_can_manage_users(role, expected):
    assert can_manage_users(role) is expected


def test_can_manage_users_accepts_role_names():
    assert can_manage_users("ADMIN") is True
    assert can_manage_users("PICKER") is False


def test_can_manage_users_rejects_unknown_roles():
    with pytest.raises(ValueError):
        can_manage_users("SUPERUSER")


def test_management_roles_cover_every_manager():
    assert MANAGEMENT_ROLES == {UserRole.OWNER, UserRole.ADMIN}
