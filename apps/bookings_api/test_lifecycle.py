import logging
from types import MappingProxyType

import pytest

from apps.auth_api.factories import AdminFactory, SuperAdminFactory, UserFactory
from apps.bookings_api.factories import BookingFactory
from apps.bookings_api.lifecycle import (
    STATUS_TRANSITIONS, TERMINAL_STATUSES, BookingLifecycle, BookingNotFound, CapabilityDenied,
    StoreError, TransitionNotAllowed,
)
from apps.bookings_api.models import Booking, BookingStatus, PaymentStatus
from apps.customers_api.factories import CustomerFactory
from apps.roles_api import permission_config as caps
from apps.roles_api.models import Role

pytestmark = pytest.mark.django_db


def test_transition_table_covers_every_status():
    assert set(STATUS_TRANSITIONS) == set(BookingStatus)
    for status in TERMINAL_STATUSES:
        assert STATUS_TRANSITIONS[status] == frozenset()
    for status, targets in STATUS_TRANSITIONS.items():
        assert status not in targets


def test_create_always_starts_requested_and_pending(service):
    lifecycle = BookingLifecycle(AdminFactory())
    booking = lifecycle.create(
        customer=CustomerFactory(),
        service=service,
        booking_time=BookingFactory.build().booking_time,
        price=service.price,
        address='1 Beach Rd',
    )
    assert booking.status == BookingStatus.REQUESTED
    assert booking.payment_status == PaymentStatus.PENDING


def test_create_requires_capability(therapist_user):
    user, _client, _profile = therapist_user
    with pytest.raises(CapabilityDenied):
        BookingLifecycle(user).create(customer=CustomerFactory(), price=10, address='x',
                                      booking_time=BookingFactory.build().booking_time)
    assert not Booking.objects.exists()


def test_admin_can_confirm_requested_booking():
    booking = BookingFactory()
    updated = BookingLifecycle(AdminFactory()).transition(booking.pk, BookingStatus.CONFIRMED)
    assert updated.status == BookingStatus.CONFIRMED
    booking.refresh_from_db()
    assert booking.status == BookingStatus.CONFIRMED


def test_transition_to_same_status_is_rejected():
    booking = BookingFactory(status=BookingStatus.CONFIRMED)
    with pytest.raises(TransitionNotAllowed):
        BookingLifecycle(AdminFactory()).transition(booking.pk, BookingStatus.CONFIRMED)


def test_unknown_target_is_rejected():
    booking = BookingFactory()
    with pytest.raises(TransitionNotAllowed):
        BookingLifecycle(AdminFactory()).transition(booking.pk, 'teleported')


@pytest.mark.parametrize('terminal', sorted(TERMINAL_STATUSES))
def test_admin_cannot_leave_terminal_status(terminal):
    booking = BookingFactory(status=terminal)
    with pytest.raises(CapabilityDenied) as excinfo:
        BookingLifecycle(AdminFactory()).transition(booking.pk, BookingStatus.REQUESTED)
    assert excinfo.value.reason == 'forbidden'
    booking.refresh_from_db()
    assert booking.status == terminal


def test_super_admin_can_override_terminal_status():
    booking = BookingFactory(status=BookingStatus.COMPLETED)
    updated = BookingLifecycle(SuperAdminFactory()).transition(booking.pk, BookingStatus.CONFIRMED)
    assert updated.status == BookingStatus.CONFIRMED


def test_therapist_edits_own_booking_but_not_others(therapist_user):
    user, _client, profile = therapist_user
    own = BookingFactory(therapist=profile)
    other = BookingFactory()
    lifecycle = BookingLifecycle(user)

    assert lifecycle.can_edit(own)
    assert not lifecycle.can_edit(other)

    assert lifecycle.transition(own.pk, BookingStatus.CONFIRMED).status == BookingStatus.CONFIRMED
    with pytest.raises(CapabilityDenied):
        lifecycle.transition(other.pk, BookingStatus.CONFIRMED)
    other.refresh_from_db()
    assert other.status == BookingStatus.REQUESTED


def test_unassigned_booking_is_not_owned_by_anyone(therapist_user):
    user, _client, _profile = therapist_user
    booking = BookingFactory(therapist=None)
    assert not BookingLifecycle(user).can_edit(booking)


def test_customer_cannot_transition():
    booking = BookingFactory()
    with pytest.raises(CapabilityDenied):
        BookingLifecycle(UserFactory(role=Role.CUSTOMER)).transition(booking.pk, BookingStatus.CANCELLED)


def test_user_without_role_cannot_transition():
    booking = BookingFactory()
    with pytest.raises(CapabilityDenied):
        BookingLifecycle(UserFactory(role=None)).transition(booking.pk, BookingStatus.CANCELLED)


def test_missing_booking():
    with pytest.raises(BookingNotFound) as excinfo:
        BookingLifecycle(AdminFactory()).transition(999999, BookingStatus.CONFIRMED)
    assert excinfo.value.booking_id == 999999


def test_allowed_targets():
    admin = BookingLifecycle(AdminFactory())
    super_admin = BookingLifecycle(SuperAdminFactory())
    requested = BookingFactory()
    completed = BookingFactory(status=BookingStatus.COMPLETED)

    assert BookingStatus.REQUESTED not in admin.allowed_targets(requested)
    assert BookingStatus.CONFIRMED in admin.allowed_targets(requested)
    assert admin.allowed_targets(completed) == []
    assert BookingStatus.COMPLETED not in super_admin.allowed_targets(completed)
    assert BookingStatus.REQUESTED in super_admin.allowed_targets(completed)


def test_injected_matrix_is_used():
    matrix = MappingProxyType({Role.ADMIN: frozenset({caps.VIEW_ALL_BOOKINGS})})
    booking = BookingFactory()
    with pytest.raises(CapabilityDenied):
        BookingLifecycle(AdminFactory(), matrix=matrix).transition(booking.pk, BookingStatus.CONFIRMED)


def test_denials_are_logged_at_info(caplog):
    booking = BookingFactory(status=BookingStatus.CANCELLED)
    with caplog.at_level(logging.INFO, logger='apps.bookings_api.lifecycle'):
        with pytest.raises(CapabilityDenied):
            BookingLifecycle(AdminFactory()).transition(booking.pk, BookingStatus.REQUESTED)
    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert 'estado final' in record.getMessage()


# -- operaciones masivas ------------------------------------------------------

def test_bulk_transition_is_not_all_or_nothing():
    a = BookingFactory()
    b = BookingFactory(status=BookingStatus.COMPLETED)
    c = BookingFactory()

    result = BookingLifecycle(AdminFactory()).bulk_transition([a.pk, b.pk, c.pk], BookingStatus.CANCELLED)

    assert result.success == [a.pk, c.pk]
    assert result.failed == [b.pk]
    assert result.errors == {b.pk: 'forbidden'}
    for booking, expected in ((a, BookingStatus.CANCELLED), (b, BookingStatus.COMPLETED),
                              (c, BookingStatus.CANCELLED)):
        booking.refresh_from_db()
        assert booking.status == expected


def test_bulk_transition_reports_store_errors(monkeypatch):
    a, b, c = BookingFactory(), BookingFactory(), BookingFactory()
    original_write = BookingLifecycle._write

    def flaky_write(self, booking_id, **fields):
        if booking_id == b.pk:
            raise StoreError("Conexión perdida", booking_id)
        return original_write(self, booking_id, **fields)

    monkeypatch.setattr(BookingLifecycle, '_write', flaky_write)
    result = BookingLifecycle(AdminFactory()).bulk_transition([a.pk, b.pk, c.pk], BookingStatus.CONFIRMED)

    assert result.to_dict() == {
        'success': [a.pk, c.pk],
        'failed': [b.pk],
        'errors': {str(b.pk): 'store_error'},
        'counts': {'success': 2, 'failed': 1},
    }
    b.refresh_from_db()
    assert b.status == BookingStatus.REQUESTED


def test_bulk_transition_mixed_ownership(therapist_user):
    user, _client, profile = therapist_user
    own = BookingFactory(therapist=profile)
    other = BookingFactory()
    result = BookingLifecycle(user).bulk_transition([own.pk, other.pk, 424242], BookingStatus.CONFIRMED)
    assert result.success == [own.pk]
    assert result.errors == {other.pk: 'forbidden', 424242: 'not_found'}


def test_bulk_transition_ignores_duplicate_ids():
    booking = BookingFactory()
    result = BookingLifecycle(AdminFactory()).bulk_transition([booking.pk, booking.pk], BookingStatus.CONFIRMED)
    assert result.success == [booking.pk]
    assert result.failed == []


# -- pagos -------------------------------------------------------------------

def test_set_payment_status():
    booking = BookingFactory()
    updated = BookingLifecycle(AdminFactory()).set_payment_status(booking.pk, PaymentStatus.PAID)
    assert updated.payment_status == PaymentStatus.PAID


def test_payment_change_to_same_value_is_rejected():
    booking = BookingFactory(payment_status=PaymentStatus.PAID)
    with pytest.raises(TransitionNotAllowed):
        BookingLifecycle(AdminFactory()).set_payment_status(booking.pk, PaymentStatus.PAID)


def test_therapist_cannot_change_payment_even_on_own_booking(therapist_user):
    user, _client, profile = therapist_user
    booking = BookingFactory(therapist=profile)
    with pytest.raises(CapabilityDenied):
        BookingLifecycle(user).set_payment_status(booking.pk, PaymentStatus.PAID)


def test_bulk_payment_status():
    a = BookingFactory()
    b = BookingFactory(payment_status=PaymentStatus.REFUNDED)
    result = BookingLifecycle(AdminFactory()).bulk_payment_status([a.pk, b.pk], PaymentStatus.REFUNDED)
    assert result.success == [a.pk]
    assert result.errors == {b.pk: 'illegal_transition'}


# -- borrado -----------------------------------------------------------------

def test_delete_and_bulk_delete():
    a, b = BookingFactory(), BookingFactory()
    lifecycle = BookingLifecycle(AdminFactory())
    lifecycle.delete(a.pk)
    assert not Booking.objects.filter(pk=a.pk).exists()

    result = lifecycle.bulk_delete([a.pk, b.pk])
    assert result.success == [b.pk]
    assert result.errors == {a.pk: 'not_found'}


def test_therapist_cannot_delete(therapist_user):
    user, _client, profile = therapist_user
    booking = BookingFactory(therapist=profile)
    with pytest.raises(CapabilityDenied):
        BookingLifecycle(user).delete(booking.pk)
    assert Booking.objects.filter(pk=booking.pk).exists()


def test_bulk_delete_store_error(monkeypatch):
    a, b = BookingFactory(), BookingFactory()
    original_remove = BookingLifecycle._remove

    def flaky_remove(self, booking_id):
        if booking_id == a.pk:
            raise StoreError("Conexión perdida", booking_id)
        return original_remove(self, booking_id)

    monkeypatch.setattr(BookingLifecycle, '_remove', flaky_remove)
    result = BookingLifecycle(AdminFactory()).bulk_delete([a.pk, b.pk])
    assert result.success == [b.pk]
    assert result.errors == {a.pk: 'store_error'}
    assert Booking.objects.filter(pk=a.pk).exists()
