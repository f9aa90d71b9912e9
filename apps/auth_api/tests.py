import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from apps.audit_api.models import AuditLog
from apps.auth_api.factories import SuperAdminFactory, UserFactory
from apps.roles_api.models import Role

User = get_user_model()

pytestmark = pytest.mark.django_db


def test_create_user_and_superuser():
    user = User.objects.create_user(email='ana@example.com', password='secret123', full_name='Ana')
    assert user.check_password('secret123')
    assert user.role is None

    admin = User.objects.create_superuser(email='root@example.com', password='secret123', full_name='Root')
    assert admin.is_staff and admin.is_superuser
    assert admin.role == Role.SUPER_ADMIN


def test_create_user_requires_email():
    with pytest.raises(ValueError):
        User.objects.create_user(email='', password='secret123')


def test_me_returns_identity(therapist_user):
    user, client, _profile = therapist_user
    response = client.get(reverse('auth-me'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data == {'id': user.pk, 'role': 'therapist', 'email': user.email, 'full_name': user.full_name}


def test_me_requires_authentication(api_client):
    response = api_client.get(reverse('auth-me'))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_bearer_header_authentication(api_client):
    user = UserFactory(role=Role.ADMIN)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {AccessToken.for_user(user)}')
    response = api_client.get(reverse('auth-me'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['role'] == 'admin'


def test_cookie_authentication(api_client):
    user = UserFactory(role=Role.THERAPIST)
    api_client.cookies['access_token'] = str(AccessToken.for_user(user))
    response = api_client.get(reverse('auth-me'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['email'] == user.email


def test_invalid_token_is_treated_as_anonymous(api_client):
    api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
    response = api_client.get(reverse('auth-me'))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_user_management_is_super_admin_only(admin_user, super_admin_user):
    _admin, admin_client = admin_user
    _root, root_client = super_admin_user

    assert admin_client.get(reverse('user-list')).status_code == status.HTTP_403_FORBIDDEN
    response = root_client.get(reverse('user-list'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['count'] == 2


def test_super_admin_creates_user_with_role(super_admin_user):
    _user, client = super_admin_user
    response = client.post(reverse('user-list'), {
        'email': 'new.therapist@example.com',
        'full_name': 'New Therapist',
        'role': 'therapist',
        'password': 'Sup3rSecret!',
    }, format='json')
    assert response.status_code == status.HTTP_201_CREATED, f"Error: {response.data}"
    created = User.objects.get(email='new.therapist@example.com')
    assert created.role == Role.THERAPIST
    assert created.check_password('Sup3rSecret!')


def test_create_user_without_password_fails(super_admin_user):
    _user, client = super_admin_user
    response = client.post(reverse('user-list'), {'email': 'x@example.com', 'full_name': 'X'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_role_change_is_audited(super_admin_user):
    _user, client = super_admin_user
    target = UserFactory(role=Role.CUSTOMER)
    response = client.patch(reverse('user-detail', args=[target.pk]), {'role': 'admin'}, format='json')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    target.refresh_from_db()
    assert target.role == Role.ADMIN

    log = AuditLog.objects.get(action='ROLE_ASSIGN')
    assert log.extra_data == {'previous_role': 'customer', 'role': 'admin'}


def test_last_super_admin_keeps_role(super_admin_user):
    user, client = super_admin_user
    response = client.patch(reverse('user-detail', args=[user.pk]), {'role': 'admin'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    user.refresh_from_db()
    assert user.role == Role.SUPER_ADMIN


def test_cannot_delete_self(super_admin_user):
    user, client = super_admin_user
    SuperAdminFactory()
    response = client.delete(reverse('user-detail', args=[user.pk]))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert User.objects.filter(pk=user.pk).exists()


def test_delete_user(super_admin_user):
    _user, client = super_admin_user
    target = UserFactory()
    response = client.delete(reverse('user-detail', args=[target.pk]))
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert not User.objects.filter(pk=target.pk).exists()
    assert AuditLog.objects.filter(action='DELETE', source='AUTH').exists()


def test_filter_users_by_role(super_admin_user):
    _user, client = super_admin_user
    therapist = UserFactory(role=Role.THERAPIST)
    UserFactory(role=Role.CUSTOMER)
    response = client.get(reverse('user-list'), {'role': 'therapist'})
    assert [item['id'] for item in response.data['results']] == [therapist.pk]
