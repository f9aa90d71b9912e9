import pytest
from django.urls import reverse
from rest_framework import status

from apps.audit_api.models import AuditLog
from apps.roles_api.models import Role
from apps.roles_api.permission_config import PERMISSION_CAPABILITIES, ROLE_PERMISSIONS


@pytest.mark.django_db
def test_capabilities_of_current_user(therapist_user):
    user, client, _profile = therapist_user
    response = client.get(reverse('role-capabilities'))
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    assert response.data['role'] == 'therapist'
    assert response.data['capabilities'] == sorted(ROLE_PERMISSIONS[Role.THERAPIST])


@pytest.mark.django_db
def test_capabilities_for_user_without_role(no_role_user):
    _user, client = no_role_user
    response = client.get(reverse('role-capabilities'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['role'] is None
    assert response.data['capabilities'] == []


@pytest.mark.django_db
def test_capabilities_requires_authentication(api_client):
    response = api_client.get(reverse('role-capabilities'))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
def test_resources_for_therapist(therapist_user):
    _user, client, _profile = therapist_user
    response = client.get(reverse('role-resources'))
    assert response.status_code == status.HTTP_200_OK
    results = response.data['results']
    assert [resource['name'] for resource in results] == ['dashboard', 'bookings', 'my-profile', 'services']
    my_profile = results[2]
    assert my_profile == {
        'name': 'my-profile',
        'list': '/my-profile',
        'edit': '/my-profile/edit',
        'meta': {'label': 'My Profile', 'icon': '👤', 'canDelete': False},
    }


@pytest.mark.django_db
def test_resources_for_super_admin(super_admin_user):
    _user, client = super_admin_user
    response = client.get(reverse('role-resources'))
    names = [resource['name'] for resource in response.data['results']]
    assert names[-3:] == ['system-settings', 'user-management', 'activity-logs']
    bookings = response.data['results'][1]
    assert bookings['create'] == '/bookings/create'
    assert bookings['meta']['canDelete'] is True


@pytest.mark.django_db
def test_matrix_for_super_admin_is_logged(super_admin_user):
    user, client = super_admin_user
    response = client.get(reverse('role-matrix'))
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    assert len(response.data['capabilities']) == len(PERMISSION_CAPABILITIES)
    assert response.data['matrix']['customer'] == sorted(ROLE_PERMISSIONS[Role.CUSTOMER])
    assert set(response.data['matrix']) == {role.value for role in Role}
    log = AuditLog.objects.get(user=user, source='ROLES')
    assert log.action == 'ADMIN_ACTION'
    assert log.description == 'Consulta de la matriz de permisos'


@pytest.mark.django_db
def test_matrix_forbidden_for_admin(admin_user):
    _user, client = admin_user
    response = client.get(reverse('role-matrix'))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert 'detail' in response.data
    assert not AuditLog.objects.filter(source='ROLES').exists()
