"""Unit tests for the hardcoded permission table."""

import pytest

from orgdesk.core.models.domain.enums import RoleId
from orgdesk.permissions import PERMISSION_ACTIONS, fallback_permissions, is_known_role


def test_admin_gets_every_flag():
    assert fallback_permissions(RoleId.ADMIN.value).granted() == list(PERMISSION_ACTIONS)


@pytest.mark.parametrize(
    "role_id,expected",
    [
        (RoleId.COACH.value, ["canLogHours", "canExportData"]),
        (RoleId.CLIENT.value, ["canExportData"]),
        (RoleId.USER.value, []),
        ("superuser", []),
        (None, []),
    ],
)
def test_role_defaults(role_id, expected):
    assert fallback_permissions(role_id).granted() == expected


def test_returned_sets_are_copies():
    first = fallback_permissions(RoleId.CLIENT.value)
    first.canManageUsers = True

    assert fallback_permissions(RoleId.CLIENT.value).canManageUsers is False


def test_is_known_role():
    assert is_known_role("coachx7") is True
    assert is_known_role("jobcoach") is False
    assert is_known_role(None) is False
