from datetime import timedelta
from types import MappingProxyType

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.audit_api.models import AuditLog
from apps.bookings_api.factories import BookingFactory
from apps.bookings_api.lifecycle import BookingLifecycle, StoreError
from apps.bookings_api.models import Booking, BookingStatus, PaymentStatus
from apps.customers_api.factories import CustomerFactory
from apps.roles_api import permission_checker
from apps.roles_api import permission_config as caps
from apps.roles_api.models import Role
from apps.roles_api.permission_config import ROLE_PERMISSIONS
from apps.therapists_api.factories import TherapistProfileFactory

pytestmark = pytest.mark.django_db


def result_ids(response):
    return [item['id'] for item in response.data['results']]


# -- listado y detalle --------------------------------------------------------

def test_admin_lists_all_bookings_with_display_fields(admin_user):
    _user, client = admin_user
    booking = BookingFactory()
    BookingFactory()

    response = client.get(reverse('booking-list'))
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    assert response.data['count'] == 2

    item = next(item for item in response.data['results'] if item['id'] == booking.pk)
    assert item['customer_name'] == booking.customer.full_name
    assert item['customer_email'] == booking.customer.email
    assert item['therapist_name'] == booking.therapist.full_name
    assert item['service_name'] == booking.service.name
    assert item['status'] == 'requested'


def test_bookings_are_ordered_by_booking_time_desc(admin_user):
    _user, client = admin_user
    now = timezone.now()
    older = BookingFactory(booking_time=now - timedelta(days=2))
    newer = BookingFactory(booking_time=now + timedelta(days=2))
    response = client.get(reverse('booking-list'))
    assert result_ids(response) == [newer.pk, older.pk]


def test_therapist_only_sees_own_bookings(therapist_user):
    _user, client, profile = therapist_user
    own = BookingFactory(therapist=profile)
    other = BookingFactory()

    response = client.get(reverse('booking-list'))
    assert response.status_code == status.HTTP_200_OK
    assert result_ids(response) == [own.pk]

    response = client.get(reverse('booking-detail', args=[other.pk]))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_customer_role_cannot_list_bookings(customer_user):
    _user, client = customer_user
    response = client.get(reverse('booking-list'))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert 'detail' in response.data


def test_anonymous_cannot_list_bookings(api_client):
    response = api_client.get(reverse('booking-list'))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_filters_treat_all_as_no_filter(admin_user):
    _user, client = admin_user
    requested = BookingFactory()
    confirmed = BookingFactory(status=BookingStatus.CONFIRMED, payment_status=PaymentStatus.PAID)

    response = client.get(reverse('booking-list'), {'status': 'all', 'payment_status': 'all',
                                                    'therapist': 'all', 'service': 'all'})
    assert sorted(result_ids(response)) == sorted([requested.pk, confirmed.pk])

    response = client.get(reverse('booking-list'), {'status': 'confirmed'})
    assert result_ids(response) == [confirmed.pk]

    response = client.get(reverse('booking-list'), {'payment_status': 'pending'})
    assert result_ids(response) == [requested.pk]

    response = client.get(reverse('booking-list'), {'therapist': requested.therapist_id})
    assert result_ids(response) == [requested.pk]

    response = client.get(reverse('booking-list'), {'service': confirmed.service_id})
    assert result_ids(response) == [confirmed.pk]


def test_invalid_therapist_filter_is_rejected(admin_user):
    _user, client = admin_user
    response = client.get(reverse('booking-list'), {'therapist': 'bob'})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_date_range_and_search(admin_user):
    _user, client = admin_user
    today = timezone.now()
    in_range = BookingFactory(booking_time=today, customer=CustomerFactory(first_name='Xanthippe'))
    BookingFactory(booking_time=today - timedelta(days=40))

    response = client.get(reverse('booking-list'), {
        'date_from': (today - timedelta(days=1)).date().isoformat(),
        'date_to': (today + timedelta(days=1)).date().isoformat(),
    })
    assert result_ids(response) == [in_range.pk]

    response = client.get(reverse('booking-list'), {'search': 'Xanthippe'})
    assert result_ids(response) == [in_range.pk]


def test_page_size_is_twenty(admin_user):
    _user, client = admin_user
    BookingFactory.create_batch(21)
    response = client.get(reverse('booking-list'))
    assert response.data['count'] == 21
    assert len(response.data['results']) == 20


# -- alta y edición -----------------------------------------------------------

def booking_payload(customer, therapist, service, **overrides):
    data = {
        'customer': customer.pk,
        'therapist': therapist.pk,
        'service': service.pk,
        'booking_time': (timezone.now() + timedelta(days=3)).isoformat(),
        'price': '150.00',
        'therapist_fee': '75.00',
        'address': '12 Ocean St, Sydney',
    }
    data.update(overrides)
    return data


def test_admin_creates_booking_in_requested_state(admin_user, customer, service):
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    response = client.post(reverse('booking-list'), booking_payload(customer, therapist, service), format='json')
    assert response.status_code == status.HTTP_201_CREATED, f"Error: {response.data}"
    assert response.data['status'] == 'requested'
    assert response.data['payment_status'] == 'pending'
    assert AuditLog.objects.filter(action='CREATE', source='BOOKINGS').exists()


def test_create_cannot_set_lifecycle_fields(admin_user, customer, service):
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    payload = booking_payload(customer, therapist, service, status='completed', payment_status='paid')
    response = client.post(reverse('booking-list'), payload, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert not Booking.objects.exists()


def test_therapist_fee_cannot_exceed_price(admin_user, customer, service):
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    payload = booking_payload(customer, therapist, service, price='50.00', therapist_fee='80.00')
    response = client.post(reverse('booking-list'), payload, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_therapist_cannot_create_bookings(therapist_user, customer, service):
    _user, client, profile = therapist_user
    response = client.post(reverse('booking-list'), booking_payload(customer, profile, service), format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_therapist_edits_own_booking_only(therapist_user):
    _user, client, profile = therapist_user
    own = BookingFactory(therapist=profile)
    other = BookingFactory()

    response = client.patch(reverse('booking-detail', args=[own.pk]), {'notes': 'Bring towels'}, format='json')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    own.refresh_from_db()
    assert own.notes == 'Bring towels'

    response = client.patch(reverse('booking-detail', args=[other.pk]), {'notes': 'x'}, format='json')
    assert response.status_code in (status.HTTP_403_FORBIDDEN, status.HTTP_404_NOT_FOUND)
    other.refresh_from_db()
    assert other.notes != 'x'


def test_own_booking_editor_cannot_reassign_or_change_amounts(therapist_user):
    _user, client, profile = therapist_user
    booking = BookingFactory(therapist=profile)
    original = (booking.customer_id, booking.price, booking.therapist_fee)
    other_therapist = TherapistProfileFactory()

    payload = {'therapist_fee': '120.00', 'price': '500.00', 'therapist': other_therapist.pk}
    response = client.patch(reverse('booking-detail', args=[booking.pk]), payload, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.patch(reverse('booking-detail', args=[booking.pk]),
                            {'customer': CustomerFactory().pk, 'notes': 'Bring towels'}, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN

    booking.refresh_from_db()
    assert booking.therapist_id == profile.pk
    assert (booking.customer_id, booking.price, booking.therapist_fee) == original
    assert booking.notes != 'Bring towels'


def test_admin_can_reassign_booking(admin_user):
    _user, client = admin_user
    booking = BookingFactory()
    other_therapist = TherapistProfileFactory()

    response = client.patch(reverse('booking-detail', args=[booking.pk]),
                            {'therapist': other_therapist.pk, 'therapist_fee': '40.00'}, format='json')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    booking.refresh_from_db()
    assert booking.therapist_id == other_therapist.pk


def test_edit_cannot_change_status(admin_user):
    _user, client = admin_user
    booking = BookingFactory()
    response = client.patch(reverse('booking-detail', args=[booking.pk]), {'status': 'completed'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    booking.refresh_from_db()
    assert booking.status == BookingStatus.REQUESTED


def test_admin_deletes_booking(admin_user):
    _user, client = admin_user
    booking = BookingFactory()
    response = client.delete(reverse('booking-detail', args=[booking.pk]))
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert not Booking.objects.filter(pk=booking.pk).exists()
    assert AuditLog.objects.filter(action='DELETE', extra_data__booking_id=booking.pk).exists()


# -- transiciones --------------------------------------------------------------

def test_transition_endpoint(admin_user):
    _user, client = admin_user
    booking = BookingFactory()
    response = client.post(reverse('booking-transition', args=[booking.pk]), {'status': 'confirmed'}, format='json')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    assert response.data['status'] == 'confirmed'
    assert AuditLog.objects.filter(action='STATUS_CHANGE', source='BOOKINGS').count() == 1


def test_terminal_status_is_forbidden_for_admin(admin_user):
    _user, client = admin_user
    booking = BookingFactory(status=BookingStatus.COMPLETED)
    response = client.post(reverse('booking-transition', args=[booking.pk]), {'status': 'requested'}, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.data['reason'] == 'forbidden'
    assert 'detail' in response.data


def test_super_admin_overrides_terminal_status(super_admin_user):
    _user, client = super_admin_user
    booking = BookingFactory(status=BookingStatus.CANCELLED)
    response = client.post(reverse('booking-transition', args=[booking.pk]), {'status': 'requested'}, format='json')
    assert response.status_code == status.HTTP_200_OK
    assert response.data['status'] == 'requested'


def test_same_status_transition_is_bad_request(admin_user):
    _user, client = admin_user
    booking = BookingFactory()
    response = client.post(reverse('booking-transition', args=[booking.pk]), {'status': 'requested'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.data['reason'] == 'illegal_transition'


def test_transition_of_missing_booking(admin_user):
    _user, client = admin_user
    response = client.post(reverse('booking-transition', args=[987654]), {'status': 'confirmed'}, format='json')
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.data['reason'] == 'not_found'


def test_unknown_status_value_is_rejected(admin_user):
    _user, client = admin_user
    booking = BookingFactory()
    response = client.post(reverse('booking-transition', args=[booking.pk]), {'status': 'lost'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_therapist_transition_on_other_booking_is_forbidden(therapist_user):
    _user, client, profile = therapist_user
    own = BookingFactory(therapist=profile)
    other = BookingFactory()

    response = client.post(reverse('booking-transition', args=[own.pk]), {'status': 'confirmed'}, format='json')
    assert response.status_code == status.HTTP_200_OK

    response = client.post(reverse('booking-transition', args=[other.pk]), {'status': 'confirmed'}, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_store_error_on_single_transition(admin_user, monkeypatch):
    _user, client = admin_user
    booking = BookingFactory()

    def broken_write(self, booking_id, **fields):
        raise StoreError("Base de datos no disponible", booking_id)

    monkeypatch.setattr(BookingLifecycle, '_write', broken_write)
    response = client.post(reverse('booking-transition', args=[booking.pk]), {'status': 'confirmed'}, format='json')
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.data['reason'] == 'store_error'
    assert not AuditLog.objects.filter(action='STATUS_CHANGE').exists()


def test_bulk_transition_reports_per_item_results(admin_user, monkeypatch):
    _user, client = admin_user
    a, b, c = BookingFactory(), BookingFactory(), BookingFactory()
    original_write = BookingLifecycle._write

    def flaky_write(self, booking_id, **fields):
        if booking_id == b.pk:
            raise StoreError("Conexión perdida", booking_id)
        return original_write(self, booking_id, **fields)

    monkeypatch.setattr(BookingLifecycle, '_write', flaky_write)
    response = client.post(reverse('booking-bulk-transition'),
                           {'ids': [a.pk, b.pk, c.pk], 'status': 'cancelled'}, format='json')

    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    assert response.data == {
        'success': [a.pk, c.pk],
        'failed': [b.pk],
        'errors': {str(b.pk): 'store_error'},
        'counts': {'success': 2, 'failed': 1},
    }
    statuses = dict(Booking.objects.values_list('pk', 'status'))
    assert statuses == {a.pk: 'cancelled', b.pk: 'requested', c.pk: 'cancelled'}
    assert AuditLog.objects.filter(action='STATUS_CHANGE').count() == 2


def test_bulk_transition_with_terminal_member(admin_user):
    _user, client = admin_user
    a = BookingFactory()
    b = BookingFactory(status=BookingStatus.DECLINED)
    response = client.post(reverse('booking-bulk-transition'),
                           {'ids': [a.pk, b.pk], 'status': 'confirmed'}, format='json')
    assert response.data['success'] == [a.pk]
    assert response.data['errors'] == {str(b.pk): 'forbidden'}


def test_bulk_transition_requires_ids(admin_user):
    _user, client = admin_user
    response = client.post(reverse('booking-bulk-transition'), {'ids': [], 'status': 'confirmed'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST


# -- pagos y borrado masivo ----------------------------------------------------

def test_payment_endpoint(admin_user):
    _user, client = admin_user
    booking = BookingFactory()
    response = client.post(reverse('booking-payment', args=[booking.pk]), {'payment_status': 'paid'}, format='json')
    assert response.status_code == status.HTTP_200_OK
    assert response.data['payment_status'] == 'paid'
    assert AuditLog.objects.filter(action='PAYMENT_CHANGE').exists()


def test_therapist_cannot_change_payment(therapist_user):
    _user, client, profile = therapist_user
    booking = BookingFactory(therapist=profile)
    response = client.post(reverse('booking-payment', args=[booking.pk]), {'payment_status': 'paid'}, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_bulk_payment(admin_user):
    _user, client = admin_user
    a = BookingFactory()
    b = BookingFactory(payment_status=PaymentStatus.PAID)
    response = client.post(reverse('booking-bulk-payment'),
                           {'ids': [a.pk, b.pk], 'payment_status': 'paid'}, format='json')
    assert response.data['success'] == [a.pk]
    assert response.data['errors'] == {str(b.pk): 'illegal_transition'}


def test_payment_only_needs_manage_payments(admin_user, monkeypatch):
    _user, client = admin_user
    matrix = MappingProxyType({
        **ROLE_PERMISSIONS,
        Role.ADMIN: frozenset({caps.VIEW_ALL_BOOKINGS, caps.MANAGE_PAYMENTS}),
    })
    monkeypatch.setattr(permission_checker, 'ROLE_PERMISSIONS', matrix)
    booking = BookingFactory()

    response = client.post(reverse('booking-payment', args=[booking.pk]), {'payment_status': 'paid'}, format='json')
    assert response.status_code == status.HTTP_200_OK, f'Error: {response.data}'
    assert response.data['payment_status'] == 'paid'

    response = client.post(reverse('booking-bulk-payment'), {'ids': [booking.pk], 'payment_status': 'refunded'},
                           format='json')
    assert response.data['success'] == [booking.pk]

    # manage_payments no da permiso para editar la reserva
    response = client.post(reverse('booking-transition', args=[booking.pk]), {'status': 'confirmed'}, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_editing_bookings_does_not_grant_payment_changes(admin_user, monkeypatch):
    _user, client = admin_user
    matrix = MappingProxyType({
        **ROLE_PERMISSIONS,
        Role.ADMIN: ROLE_PERMISSIONS[Role.ADMIN] - {caps.MANAGE_PAYMENTS},
    })
    monkeypatch.setattr(permission_checker, 'ROLE_PERMISSIONS', matrix)
    booking = BookingFactory()

    response = client.post(reverse('booking-payment', args=[booking.pk]), {'payment_status': 'paid'}, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN
    booking.refresh_from_db()
    assert booking.payment_status == PaymentStatus.PENDING


def test_bulk_delete(admin_user):
    _user, client = admin_user
    a, b = BookingFactory(), BookingFactory()
    response = client.post(reverse('booking-bulk-delete'), {'ids': [a.pk, b.pk, 555555]}, format='json')
    assert response.status_code == status.HTTP_200_OK
    assert response.data['success'] == [a.pk, b.pk]
    assert response.data['errors'] == {'555555': 'not_found'}
    assert not Booking.objects.exists()


def test_therapist_cannot_bulk_delete(therapist_user):
    _user, client, profile = therapist_user
    booking = BookingFactory(therapist=profile)
    response = client.post(reverse('booking-bulk-delete'), {'ids': [booking.pk]}, format='json')
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert Booking.objects.filter(pk=booking.pk).exists()


# -- metadatos -----------------------------------------------------------------

def test_statuses_metadata(therapist_user):
    _user, client, _profile = therapist_user
    response = client.get(reverse('booking-statuses'))
    assert response.status_code == status.HTTP_200_OK
    statuses = {item['value']: item for item in response.data['statuses']}
    assert statuses['requested']['color'] == 'orange'
    assert statuses['confirmed']['color'] == 'blue'
    assert statuses['timeout_reassigned']['color'] == 'purple'
    assert statuses['completed']['terminal'] is True
    assert statuses['completed']['transitions'] == []
    payments = {item['value']: item['color'] for item in response.data['payment_statuses']}
    assert payments == {'pending': 'orange', 'paid': 'green', 'refunded': 'red'}
    assert response.data['can_override_terminal'] is False
    assert response.data['can_manage_payments'] is False
