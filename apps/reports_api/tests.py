from datetime import timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.bookings_api.factories import BookingFactory
from apps.bookings_api.models import BookingStatus, PaymentStatus

pytestmark = pytest.mark.django_db


def test_dashboard_for_admin_includes_counts(admin_user):
    _user, client = admin_user
    BookingFactory(booking_time=timezone.now() + timedelta(days=1))
    BookingFactory(status=BookingStatus.COMPLETED, payment_status=PaymentStatus.PAID)

    response = client.get(reverse('dashboard-stats'))
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    assert response.data['bookings']['total'] == 2
    assert response.data['bookings']['pending_payment'] == 1
    assert response.data['bookings']['by_status']['completed'] == 1
    assert response.data['customers'] == 2
    assert response.data['therapists'] == 2
    assert response.data['services'] == 2


def test_dashboard_for_therapist_is_scoped(therapist_user):
    _user, client, profile = therapist_user
    BookingFactory(therapist=profile)
    BookingFactory()

    response = client.get(reverse('dashboard-stats'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['bookings']['total'] == 1
    assert 'customers' not in response.data
    assert 'therapists' not in response.data
    assert 'services' in response.data


def test_dashboard_for_customer_role_has_no_bookings(customer_user):
    _user, client = customer_user
    BookingFactory()
    response = client.get(reverse('dashboard-stats'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['bookings']['total'] == 0


def test_dashboard_denies_user_without_role(no_role_user):
    _user, client = no_role_user
    response = client.get(reverse('dashboard-stats'))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_dashboard_requires_authentication(api_client):
    response = api_client.get(reverse('dashboard-stats'))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_booking_report_totals(admin_user):
    _user, client = admin_user
    now = timezone.now()
    paid = BookingFactory(booking_time=now, payment_status=PaymentStatus.PAID,
                          price=Decimal('200.00'), therapist_fee=Decimal('90.00'))
    BookingFactory(booking_time=now, payment_status=PaymentStatus.REFUNDED, price=Decimal('50.00'))
    BookingFactory(booking_time=now - timedelta(days=60), payment_status=PaymentStatus.PAID)

    response = client.get(reverse('booking-report'))
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    assert response.data['total_bookings'] == 2
    assert response.data['revenue'] == 200.0
    assert response.data['therapist_fees'] == 90.0
    assert response.data['net_revenue'] == 110.0
    assert response.data['refunded'] == 50.0
    assert response.data['by_payment_status'] == {'pending': 0, 'paid': 1, 'refunded': 1}
    top = next(row for row in response.data['by_therapist'] if row['therapist'] == paid.therapist_id)
    assert top['fees'] == 90.0


def test_booking_report_date_range(admin_user):
    _user, client = admin_user
    old = timezone.now() - timedelta(days=60)
    BookingFactory(booking_time=old)
    response = client.get(reverse('booking-report'), {
        'date_from': (old - timedelta(days=1)).date().isoformat(),
        'date_to': (old + timedelta(days=1)).date().isoformat(),
    })
    assert response.data['total_bookings'] == 1


def test_booking_report_forbidden_for_therapist(therapist_user):
    _user, client, _profile = therapist_user
    response = client.get(reverse('booking-report'))
    assert response.status_code == status.HTTP_403_FORBIDDEN
