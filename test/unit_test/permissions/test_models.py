"""Unit tests for permission flag helpers."""

import pytest

from orgdesk.permissions import (
    CalendarPermissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
)


@pytest.fixture
def coach_flags() -> CalendarPermissions:
    return CalendarPermissions(canLogHours=True, canExportData=True)


def test_defaults_are_all_false():
    assert CalendarPermissions().granted() == []


def test_serializes_with_camel_case_names(coach_flags):
    dumped = coach_flags.model_dump()

    assert dumped["canLogHours"] is True
    assert dumped["canCreateSLS"] is False
    assert len(dumped) == 9


def test_has_permission(coach_flags):
    assert has_permission(coach_flags, "canLogHours") is True
    assert has_permission(coach_flags, "canManageUsers") is False


def test_has_permission_rejects_unknown_flag(coach_flags):
    with pytest.raises(KeyError):
        has_permission(coach_flags, "canFly")


def test_all_and_any(coach_flags):
    assert has_all_permissions(coach_flags, ["canLogHours", "canExportData"]) is True
    assert has_all_permissions(coach_flags, ["canLogHours", "canEditEvents"]) is False
    assert has_any_permission(coach_flags, ["canEditEvents", "canExportData"]) is True
    assert has_any_permission(coach_flags, []) is False
    assert has_all_permissions(coach_flags, []) is True
