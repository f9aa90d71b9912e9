import logging
from types import MappingProxyType

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.auth_api.factories import UserFactory
from apps.roles_api import permission_config as caps
from apps.roles_api.management.commands.check_permission_matrix import matrix_errors
from apps.roles_api.models import Role
from apps.roles_api.permission_checker import (
    PermissionChecker, UnknownCapabilityError, can_access, normalize_role, role_of,
)
from apps.roles_api.permission_config import PERMISSION_CAPABILITIES, ROLE_PERMISSIONS
from apps.roles_api.resources import requires


def test_every_role_has_an_entry():
    assert set(ROLE_PERMISSIONS) == set(Role)


def test_matrix_only_uses_catalog_capabilities():
    for role, granted in ROLE_PERMISSIONS.items():
        assert granted <= set(PERMISSION_CAPABILITIES), f"{role}: {granted - set(PERMISSION_CAPABILITIES)}"


def test_matrix_is_read_only():
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS[Role.CUSTOMER] = frozenset({caps.MANAGE_USERS})


OWN_ONLY_CAPABILITIES = frozenset({caps.VIEW_OWN_BOOKINGS, caps.EDIT_OWN_BOOKINGS})


def test_super_admin_has_every_capability_except_own_only_ones():
    # view_all/edit_all ya cubren las reservas propias
    assert ROLE_PERMISSIONS[Role.SUPER_ADMIN] == frozenset(PERMISSION_CAPABILITIES) - OWN_ONLY_CAPABILITIES
    assert can_access(Role.SUPER_ADMIN, caps.VIEW_ALL_BOOKINGS)
    assert can_access(Role.SUPER_ADMIN, caps.EDIT_ALL_BOOKINGS)


def test_admin_cannot_override_terminal_status_or_manage_users():
    assert not can_access(Role.ADMIN, caps.OVERRIDE_TERMINAL_STATUS)
    assert not can_access(Role.ADMIN, caps.MANAGE_USERS)
    assert not can_access(Role.ADMIN, caps.ACCESS_SYSTEM_SETTINGS)
    assert can_access(Role.ADMIN, caps.EDIT_ALL_BOOKINGS)


def test_therapist_only_has_own_booking_capabilities():
    assert can_access(Role.THERAPIST, caps.VIEW_OWN_BOOKINGS)
    assert can_access(Role.THERAPIST, caps.EDIT_OWN_BOOKINGS)
    assert not can_access(Role.THERAPIST, caps.VIEW_ALL_BOOKINGS)
    assert not can_access(Role.THERAPIST, caps.EDIT_ALL_BOOKINGS)
    assert not can_access(Role.THERAPIST, caps.VIEW_CUSTOMERS)


def test_dashboard_is_an_explicit_grant_for_every_role():
    for role in Role:
        assert can_access(role, caps.VIEW_DASHBOARD)


@pytest.mark.parametrize('role', [None, '', 'manager', 'SUPER_ADMIN'])
def test_missing_or_unknown_role_is_denied(role):
    assert can_access(role, caps.VIEW_DASHBOARD) is False


def test_string_role_values_are_accepted():
    assert can_access('super_admin', caps.MANAGE_USERS) is True
    assert normalize_role('therapist') is Role.THERAPIST
    assert normalize_role('nope') is None


def test_injected_matrix_replaces_default():
    matrix = MappingProxyType({Role.CUSTOMER: frozenset({caps.VIEW_REPORTS})})
    assert can_access(Role.CUSTOMER, caps.VIEW_REPORTS, matrix) is True
    assert can_access(Role.CUSTOMER, caps.VIEW_DASHBOARD, matrix) is False
    assert can_access(Role.ADMIN, caps.VIEW_REPORTS, matrix) is False


def test_unknown_capability_raises_in_strict_mode(settings):
    settings.RBAC_STRICT_CAPABILITIES = True
    with pytest.raises(UnknownCapabilityError) as excinfo:
        can_access(Role.SUPER_ADMIN, 'canLaunchRockets')
    assert excinfo.value.capability == 'canLaunchRockets'


def test_unknown_capability_is_denied_and_reported_otherwise(settings, monkeypatch, caplog):
    settings.RBAC_STRICT_CAPABILITIES = False
    reported = []
    monkeypatch.setattr(
        'apps.roles_api.permission_checker.sentry_sdk.capture_message',
        lambda message, level=None: reported.append((message, level)),
    )

    with caplog.at_level(logging.ERROR, logger='apps.roles_api.permission_checker'):
        assert can_access(Role.SUPER_ADMIN, 'canLaunchRockets') is False

    assert reported == [('Unknown RBAC capability: canLaunchRockets', 'error')]
    assert 'canLaunchRockets' in caplog.text


def test_unknown_capability_inside_requirement_denies(settings, monkeypatch):
    settings.RBAC_STRICT_CAPABILITIES = False
    monkeypatch.setattr('apps.roles_api.permission_checker.sentry_sdk.capture_message', lambda *a, **k: None)
    assert requires('typo_capability').is_met(Role.SUPER_ADMIN) is False
    assert requires('typo_capability', caps.VIEW_DASHBOARD).is_met(Role.CUSTOMER) is True


@pytest.mark.django_db
def test_role_of_user():
    assert role_of(UserFactory(role=Role.ADMIN)) is Role.ADMIN
    assert role_of(UserFactory(role=None)) is None
    assert role_of(None) is None


@pytest.mark.django_db
def test_superuser_flag_does_not_bypass_the_matrix():
    user = UserFactory(role=Role.CUSTOMER, is_superuser=True, is_staff=True)
    assert PermissionChecker.user_has_permission(user, caps.MANAGE_USERS) is False


@pytest.mark.django_db
def test_permission_checker_helpers():
    user = UserFactory(role=Role.THERAPIST)
    assert PermissionChecker.user_has_any(user, [caps.VIEW_ALL_BOOKINGS, caps.VIEW_OWN_BOOKINGS])
    assert not PermissionChecker.user_has_any(user, [caps.VIEW_ALL_BOOKINGS, caps.MANAGE_USERS])
    assert PermissionChecker.get_user_capabilities(user) == sorted(ROLE_PERMISSIONS[Role.THERAPIST])
    assert PermissionChecker.get_user_capabilities(UserFactory(role=None)) == []


def test_check_permission_matrix_command_passes():
    call_command('check_permission_matrix')


def test_matrix_errors_detects_problems():
    matrix = {Role.SUPER_ADMIN: frozenset({'ghost'})}
    errors = matrix_errors(matrix=matrix)
    assert any("'admin'" in error for error in errors)
    assert any("'ghost'" in error for error in errors)


def test_check_permission_matrix_command_fails_on_bad_matrix(monkeypatch):
    monkeypatch.setattr(
        'apps.roles_api.management.commands.check_permission_matrix.matrix_errors',
        lambda: ["El rol 'admin' no tiene entrada en la matriz"],
    )
    with pytest.raises(CommandError):
        call_command('check_permission_matrix')
