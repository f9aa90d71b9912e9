import pytest
from django.urls import reverse
from rest_framework import status

from apps.audit_api.models import AuditLog
from apps.services_api.factories import ServiceFactory
from apps.services_api.models import Service

pytestmark = pytest.mark.django_db


def test_create_service(admin_user):
    user, client = admin_user
    data = {
        'name': 'Deep Tissue',
        'description': 'Masaje de tejido profundo',
        'category': 'remedial',
        'price': '140.00',
        'duration': 90,
        'is_active': True,
    }
    response = client.post(reverse('service-list'), data, format='json')
    assert response.status_code == status.HTTP_201_CREATED, f"Error: {response.data}"
    service = Service.objects.get()
    assert service.name == 'Deep Tissue'
    assert service.duration == 90
    assert AuditLog.objects.filter(action='CREATE', source='SERVICES', user=user).exists()


def test_duration_minimum(admin_user):
    _user, client = admin_user
    response = client.post(reverse('service-list'), {'name': 'Quick', 'price': '20.00', 'duration': 5}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert 'duration' in response.data['details']


def test_negative_price(admin_user):
    _user, client = admin_user
    response = client.post(reverse('service-list'), {'name': 'Free', 'price': '-1.00'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_therapist_can_view_but_not_edit_services(therapist_user):
    _user, client, _profile = therapist_user
    service = ServiceFactory()

    assert client.get(reverse('service-list')).status_code == status.HTTP_200_OK
    assert client.get(reverse('service-detail', args=[service.pk])).status_code == status.HTTP_200_OK

    response = client.patch(reverse('service-detail', args=[service.pk]), {'price': '1.00'}, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN
    response = client.delete(reverse('service-detail', args=[service.pk]))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_customer_cannot_view_services(customer_user):
    _user, client = customer_user
    assert client.get(reverse('service-list')).status_code == status.HTTP_403_FORBIDDEN


def test_lookups_only_active_services_ordered_by_name(admin_user):
    _user, client = admin_user
    ServiceFactory(name='Swedish')
    ServiceFactory(name='Aromatherapy')
    ServiceFactory(name='Hot Stone', is_active=False)
    response = client.get(reverse('service-lookups'))
    assert [item['name'] for item in response.data] == ['Aromatherapy', 'Swedish']


def test_categories(admin_user):
    _user, client = admin_user
    ServiceFactory(category='remedial')
    ServiceFactory(category='relaxation')
    ServiceFactory(category='remedial')
    response = client.get(reverse('service-categories'))
    assert response.data == ['relaxation', 'remedial']


def test_delete_service(admin_user):
    _user, client = admin_user
    service = ServiceFactory()
    response = client.delete(reverse('service-detail', args=[service.pk]))
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert not Service.objects.exists()
