"""
Ciclo de vida de las reservas.

`status` y `payment_status` sólo cambian a través de BookingLifecycle. Cada
cambio se valida contra la matriz de permisos y, para `status`, contra
STATUS_TRANSITIONS. Las operaciones masivas validan y escriben cada reserva
por separado: un fallo no deshace las reservas ya escritas y el resultado
indica qué ids se aplicaron y por qué fallaron los demás.
"""
import logging
from dataclasses import dataclass, field
from types import MappingProxyType

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.roles_api import permission_config as caps
from apps.roles_api.permission_checker import can_access, role_of

from .models import Booking, BookingStatus, PaymentStatus

logger = logging.getLogger(__name__)

S = BookingStatus

TERMINAL_STATUSES = frozenset({S.COMPLETED, S.CANCELLED, S.DECLINED})

STATUS_TRANSITIONS = MappingProxyType({
    S.REQUESTED: frozenset({
        S.CONFIRMED, S.COMPLETED, S.CANCELLED, S.DECLINED, S.TIMEOUT_REASSIGNED, S.SEEKING_ALTERNATE,
    }),
    S.CONFIRMED: frozenset({
        S.REQUESTED, S.COMPLETED, S.CANCELLED, S.DECLINED, S.TIMEOUT_REASSIGNED, S.SEEKING_ALTERNATE,
    }),
    S.TIMEOUT_REASSIGNED: frozenset({
        S.REQUESTED, S.CONFIRMED, S.COMPLETED, S.CANCELLED, S.DECLINED, S.SEEKING_ALTERNATE,
    }),
    S.SEEKING_ALTERNATE: frozenset({
        S.REQUESTED, S.CONFIRMED, S.COMPLETED, S.CANCELLED, S.DECLINED, S.TIMEOUT_REASSIGNED,
    }),
    # Estados finales: sólo se sale con override_terminal_status
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.DECLINED: frozenset(),
})


class LifecycleError(Exception):
    reason = 'error'

    def __init__(self, message, booking_id=None):
        super().__init__(message)
        self.booking_id = booking_id


class BookingNotFound(LifecycleError):
    reason = 'not_found'


class CapabilityDenied(LifecycleError):
    reason = 'forbidden'


class TransitionNotAllowed(LifecycleError):
    reason = 'illegal_transition'


class StoreError(LifecycleError):
    reason = 'store_error'


@dataclass
class BatchResult:
    success: list = field(default_factory=list)
    failed: list = field(default_factory=list)
    errors: dict = field(default_factory=dict)

    def add_success(self, booking_id):
        self.success.append(booking_id)

    def add_failure(self, booking_id, error):
        self.failed.append(booking_id)
        self.errors[booking_id] = error.reason

    def to_dict(self):
        return {
            'success': self.success,
            'failed': self.failed,
            'errors': {str(booking_id): reason for booking_id, reason in self.errors.items()},
            'counts': {'success': len(self.success), 'failed': len(self.failed)},
        }


def _unique(ids):
    seen = set()
    ordered = []
    for booking_id in ids:
        if booking_id not in seen:
            seen.add(booking_id)
            ordered.append(booking_id)
    return ordered


class BookingLifecycle:
    """Operaciones de estado sobre reservas en nombre de `actor`."""

    def __init__(self, actor, matrix=None):
        self.actor = actor
        self.role = role_of(actor)
        self.matrix = matrix

    # -- permisos --------------------------------------------------------

    def can(self, capability):
        return can_access(self.role, capability, self.matrix)

    def owns(self, booking):
        therapist = booking.therapist
        return therapist is not None and therapist.user_id is not None and therapist.user_id == self.actor.pk

    def can_edit(self, booking):
        if self.can(caps.EDIT_ALL_BOOKINGS):
            return True
        return self.can(caps.EDIT_OWN_BOOKINGS) and self.owns(booking)

    def allowed_targets(self, booking):
        """Estados a los que este actor puede llevar la reserva ahora mismo."""
        if not self.can_edit(booking):
            return []
        current = BookingStatus(booking.status)
        if current in TERMINAL_STATUSES:
            if not self.can(caps.OVERRIDE_TERMINAL_STATUS):
                return []
            return [status for status in BookingStatus.values if status != current]
        return [status for status in BookingStatus.values if status in STATUS_TRANSITIONS[current]]

    def _deny(self, message, booking_id):
        logger.info(f"Usuario {self.actor.pk} (rol={self.role}): {message}")
        raise CapabilityDenied(message, booking_id)

    def check_transition(self, booking, target):
        if target not in BookingStatus.values:
            raise TransitionNotAllowed(f"Estado desconocido: '{target}'", booking.pk)

        if not self.can_edit(booking):
            self._deny(f"sin permiso para cambiar el estado de la reserva {booking.pk}", booking.pk)

        current = BookingStatus(booking.status)
        if target == current:
            raise TransitionNotAllowed(f"La reserva {booking.pk} ya está en '{current}'", booking.pk)

        if current in TERMINAL_STATUSES:
            if not self.can(caps.OVERRIDE_TERMINAL_STATUS):
                self._deny(f"la reserva {booking.pk} está en estado final '{current}'", booking.pk)
            return

        if target not in STATUS_TRANSITIONS[current]:
            raise TransitionNotAllowed(f"Transición no permitida: '{current}' → '{target}'", booking.pk)

    # -- acceso a datos --------------------------------------------------

    def _load(self, booking_id):
        try:
            return Booking.objects.select_related('therapist').get(pk=booking_id)
        except (Booking.DoesNotExist, ValueError, TypeError):
            raise BookingNotFound(f"Reserva {booking_id} no encontrada", booking_id)

    def _write(self, booking_id, **fields):
        """Escribe los campos de una única reserva en su propia transacción."""
        fields['updated_at'] = timezone.now()
        try:
            with transaction.atomic():
                updated = Booking.objects.filter(pk=booking_id).update(**fields)
        except DatabaseError as e:
            logger.exception(f"Error al guardar la reserva {booking_id}")
            raise StoreError(f"No se pudo guardar la reserva {booking_id}: {e}", booking_id)
        if updated == 0:
            raise BookingNotFound(f"Reserva {booking_id} no encontrada", booking_id)

    def _remove(self, booking_id):
        try:
            with transaction.atomic():
                deleted, _ = Booking.objects.filter(pk=booking_id).delete()
        except DatabaseError as e:
            logger.exception(f"Error al eliminar la reserva {booking_id}")
            raise StoreError(f"No se pudo eliminar la reserva {booking_id}: {e}", booking_id)
        if deleted == 0:
            raise BookingNotFound(f"Reserva {booking_id} no encontrada", booking_id)

    # -- operaciones -----------------------------------------------------

    def create(self, **fields):
        """Crea una reserva; siempre empieza en requested / pending."""
        if not self.can(caps.CREATE_BOOKINGS):
            self._deny("sin permiso para crear reservas", None)

        fields['status'] = BookingStatus.REQUESTED
        fields['payment_status'] = PaymentStatus.PENDING
        try:
            with transaction.atomic():
                booking = Booking.objects.create(**fields)
        except DatabaseError as e:
            logger.exception("Error al crear la reserva")
            raise StoreError(f"No se pudo crear la reserva: {e}")
        logger.info(f"Reserva {booking.pk} creada por usuario {self.actor.pk}")
        return booking

    def transition(self, booking_id, target):
        booking = self._load(booking_id)
        self.check_transition(booking, target)
        previous = booking.status
        self._write(booking.pk, status=target)
        logger.info(f"Reserva {booking.pk}: {previous} → {target} (usuario {self.actor.pk})")
        return self._load(booking.pk)

    def bulk_transition(self, booking_ids, target):
        result = BatchResult()
        for booking_id in _unique(booking_ids):
            try:
                self.transition(booking_id, target)
            except LifecycleError as e:
                result.add_failure(booking_id, e)
            else:
                result.add_success(booking_id)
        return result

    def check_payment_change(self, booking, target):
        if not self.can(caps.MANAGE_PAYMENTS):
            self._deny(f"sin permiso para cambiar el pago de la reserva {booking.pk}", booking.pk)
        if target not in PaymentStatus.values:
            raise TransitionNotAllowed(f"Estado de pago desconocido: '{target}'", booking.pk)
        if target == booking.payment_status:
            raise TransitionNotAllowed(f"La reserva {booking.pk} ya tiene el pago en '{target}'", booking.pk)

    def set_payment_status(self, booking_id, target):
        booking = self._load(booking_id)
        self.check_payment_change(booking, target)
        previous = booking.payment_status
        self._write(booking.pk, payment_status=target)
        logger.info(f"Reserva {booking.pk}: pago {previous} → {target} (usuario {self.actor.pk})")
        return self._load(booking.pk)

    def bulk_payment_status(self, booking_ids, target):
        result = BatchResult()
        for booking_id in _unique(booking_ids):
            try:
                self.set_payment_status(booking_id, target)
            except LifecycleError as e:
                result.add_failure(booking_id, e)
            else:
                result.add_success(booking_id)
        return result

    def delete(self, booking_id):
        """Borrado definitivo, sin papelera."""
        if not self.can(caps.DELETE_BOOKINGS):
            self._deny(f"sin permiso para eliminar la reserva {booking_id}", booking_id)
        self._remove(booking_id)
        logger.info(f"Reserva {booking_id} eliminada por usuario {self.actor.pk}")

    def bulk_delete(self, booking_ids):
        result = BatchResult()
        for booking_id in _unique(booking_ids):
            try:
                self.delete(booking_id)
            except LifecycleError as e:
                result.add_failure(booking_id, e)
            else:
                result.add_success(booking_id)
        return result
