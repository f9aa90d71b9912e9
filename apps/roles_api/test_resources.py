from types import MappingProxyType

import pytest
from django.core.exceptions import ImproperlyConfigured

from apps.roles_api import permission_config as caps
from apps.roles_api.models import Role
from apps.roles_api.permission_config import ROLE_PERMISSIONS
from apps.roles_api.resources import (
    RESOURCE_TABLE, Requirement, build_resource_catalog, requirement_for, requires, requires_role,
)


def names(catalog):
    return [descriptor.name for descriptor in catalog]


def by_name(catalog):
    return {descriptor.name: descriptor.to_dict() for descriptor in catalog}


def test_super_admin_sees_every_resource_except_my_profile():
    assert names(build_resource_catalog(Role.SUPER_ADMIN)) == [
        'dashboard', 'bookings', 'therapist_profiles', 'customers', 'services',
        'reports', 'system-settings', 'user-management', 'activity-logs',
    ]


def test_super_admin_catalog_is_superset_of_admin():
    assert set(names(build_resource_catalog(Role.ADMIN))) <= set(names(build_resource_catalog(Role.SUPER_ADMIN)))


def test_admin_catalog():
    assert names(build_resource_catalog(Role.ADMIN)) == [
        'dashboard', 'bookings', 'therapist_profiles', 'customers', 'services', 'reports',
    ]


def test_therapist_catalog():
    catalog = build_resource_catalog(Role.THERAPIST)
    assert names(catalog) == ['dashboard', 'bookings', 'my-profile', 'services']
    assert 'customers' not in names(catalog)
    assert 'therapist_profiles' not in names(catalog)


def test_therapist_bookings_descriptor_has_no_create_or_delete():
    bookings = by_name(build_resource_catalog(Role.THERAPIST))['bookings']
    assert bookings == {
        'name': 'bookings',
        'list': '/bookings',
        'show': '/bookings/show/:id',
        'edit': '/bookings/edit/:id',
        'meta': {'label': 'Bookings', 'icon': '📋', 'canDelete': False},
    }


def test_services_are_read_only_for_therapists():
    services = by_name(build_resource_catalog(Role.THERAPIST))['services']
    assert 'show' in services
    assert 'edit' not in services
    assert 'create' not in services
    assert services['meta']['canDelete'] is False


def test_customers_never_offer_create():
    customers = by_name(build_resource_catalog(Role.SUPER_ADMIN))['customers']
    assert 'create' not in customers
    assert customers['meta']['canDelete'] is True


def test_customer_role_only_sees_dashboard():
    assert names(build_resource_catalog(Role.CUSTOMER)) == ['dashboard']


@pytest.mark.parametrize('role', [None, 'unknown'])
def test_no_role_gets_empty_catalog(role):
    assert build_resource_catalog(role) == []


def test_my_profile_requires_therapist_role_and_capability():
    # Admin y super_admin tienen edit_own_profile pero no son terapeutas
    assert 'my-profile' not in names(build_resource_catalog(Role.ADMIN))
    assert 'my-profile' not in names(build_resource_catalog(Role.SUPER_ADMIN))

    matrix = MappingProxyType({role: frozenset() for role in Role})
    assert 'my-profile' not in names(build_resource_catalog(Role.THERAPIST, matrix))


def test_catalog_follows_injected_matrix():
    matrix = MappingProxyType({
        Role.SUPER_ADMIN: frozenset(),
        Role.ADMIN: frozenset(),
        Role.THERAPIST: frozenset(),
        Role.CUSTOMER: frozenset({caps.VIEW_CUSTOMERS, caps.DELETE_CUSTOMERS}),
    })
    catalog = by_name(build_resource_catalog(Role.CUSTOMER, matrix))
    assert list(catalog) == ['customers']
    assert catalog['customers']['show'] == '/customers/show/:id'
    assert 'edit' not in catalog['customers']
    assert catalog['customers']['meta']['canDelete'] is True


def test_every_resource_has_a_capability_check():
    for resource in RESOURCE_TABLE:
        assert resource.visibility.capabilities, resource.name
        for action in resource.actions.values():
            assert action.requirement.capabilities, resource.name


def test_requirement_is_any_of():
    requirement = requires(caps.VIEW_ALL_BOOKINGS, caps.VIEW_OWN_BOOKINGS)
    assert requirement.is_met(Role.THERAPIST)
    assert requirement.is_met(Role.ADMIN)
    assert not requirement.is_met(Role.CUSTOMER)


def test_role_restricted_requirement():
    requirement = requires_role(caps.EDIT_OWN_PROFILE, Role.THERAPIST)
    assert requirement.is_met('therapist')
    assert not requirement.is_met(Role.CUSTOMER)
    assert not requirement.is_met(Role.ADMIN)


def test_empty_requirement_is_never_met():
    assert not Requirement(capabilities=()).is_met(Role.SUPER_ADMIN)


def test_requirement_for():
    assert requirement_for('bookings', 'list') == requires(caps.VIEW_ALL_BOOKINGS, caps.VIEW_OWN_BOOKINGS)
    assert requirement_for('customers', 'create') is None
    assert requirement_for('reports', 'delete') is None
    with pytest.raises(ImproperlyConfigured):
        requirement_for('invoices', 'list')


def test_toggling_one_capability_only_changes_resources_gated_by_it():
    full = MappingProxyType(dict(ROLE_PERMISSIONS))
    reduced = MappingProxyType({
        **ROLE_PERMISSIONS,
        Role.ADMIN: ROLE_PERMISSIONS[Role.ADMIN] - {caps.DELETE_SERVICES},
    })

    before = by_name(build_resource_catalog(Role.ADMIN, full))
    after = by_name(build_resource_catalog(Role.ADMIN, reduced))

    assert list(before) == list(after)
    changed = [name for name in before if before[name] != after[name]]
    assert changed == ['services']
    assert after['services']['meta']['canDelete'] is False
