from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from apps.bookings_api.factories import BookingFactory
from apps.bookings_api.models import BookingStatus, PaymentStatus
from apps.customers_api.factories import CustomerFactory
from apps.customers_api.models import Customer

pytestmark = pytest.mark.django_db


def test_admin_lists_customers(admin_user):
    _user, client = admin_user
    CustomerFactory.create_batch(3)
    response = client.get(reverse('customer-list'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['count'] == 3


def test_customers_cannot_be_created_from_console(admin_user):
    _user, client = admin_user
    response = client.post(reverse('customer-list'), {'first_name': 'Eve', 'email': 'eve@example.com'},
                           format='json')
    assert response.status_code in (status.HTTP_403_FORBIDDEN, status.HTTP_405_METHOD_NOT_ALLOWED)
    assert not Customer.objects.exists()


def test_therapist_cannot_see_customers(therapist_user):
    _user, client, _profile = therapist_user
    assert client.get(reverse('customer-list')).status_code == status.HTTP_403_FORBIDDEN


def test_update_requires_contact(admin_user):
    _user, client = admin_user
    customer = CustomerFactory()
    response = client.patch(reverse('customer-detail', args=[customer.pk]), {'email': '', 'phone': ''},
                            format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.patch(reverse('customer-detail', args=[customer.pk]), {'notes': 'Prefers mornings'},
                            format='json')
    assert response.status_code == status.HTTP_200_OK
    assert response.data['notes'] == 'Prefers mornings'


def test_lookups_ordered_by_first_name(admin_user):
    _user, client = admin_user
    CustomerFactory(first_name='Zoe')
    CustomerFactory(first_name='Adam')
    response = client.get(reverse('customer-lookups'))
    assert [item['first_name'] for item in response.data] == ['Adam', 'Zoe']


def test_history_and_stats(admin_user):
    _user, client = admin_user
    customer = CustomerFactory()
    BookingFactory(customer=customer, status=BookingStatus.COMPLETED, payment_status=PaymentStatus.PAID,
                   price=Decimal('100.00'))
    BookingFactory(customer=customer)

    response = client.get(reverse('customer-history', args=[customer.pk]))
    assert response.status_code == status.HTTP_200_OK
    assert len(response.data) == 2

    response = client.get(reverse('customer-stats', args=[customer.pk]))
    assert response.data == {'total_bookings': 2, 'completed_bookings': 1, 'total_spent': 100.0}


def test_delete_customer(admin_user):
    _user, client = admin_user
    customer = CustomerFactory()
    response = client.delete(reverse('customer-detail', args=[customer.pk]))
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert not Customer.objects.exists()
