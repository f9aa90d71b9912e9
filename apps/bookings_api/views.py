import logging

from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from apps.audit_api.mixins import AuditLoggingMixin
from apps.audit_api.utils import create_audit_log
from apps.roles_api import permission_config as caps
from apps.roles_api.permissions import CatalogPermission

from .filters import BookingFilter
from .lifecycle import (
    STATUS_TRANSITIONS, TERMINAL_STATUSES, BookingLifecycle, LifecycleError,
)
from .models import Booking, BookingStatus, PaymentStatus
from .permissions import CanEditBooking
from .serializers import (
    BatchResultSerializer, BookingIdsSerializer, BookingSerializer, BookingWriteSerializer,
    BulkPaymentStatusSerializer, BulkTransitionSerializer, PaymentStatusSerializer,
    TransitionSerializer,
)

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    BookingStatus.REQUESTED: 'orange',
    BookingStatus.CONFIRMED: 'blue',
    BookingStatus.COMPLETED: 'green',
    BookingStatus.CANCELLED: 'red',
    BookingStatus.DECLINED: 'red',
    BookingStatus.TIMEOUT_REASSIGNED: 'purple',
    BookingStatus.SEEKING_ALTERNATE: 'orange',
}

PAYMENT_COLORS = {
    PaymentStatus.PENDING: 'orange',
    PaymentStatus.PAID: 'green',
    PaymentStatus.REFUNDED: 'red',
}

ERROR_STATUS_CODES = {
    'not_found': status.HTTP_404_NOT_FOUND,
    'forbidden': status.HTTP_403_FORBIDDEN,
    'illegal_transition': status.HTTP_400_BAD_REQUEST,
    'store_error': status.HTTP_503_SERVICE_UNAVAILABLE,
}


def lifecycle_error_response(error):
    code = ERROR_STATUS_CODES.get(error.reason, status.HTTP_400_BAD_REQUEST)
    if error.reason == 'forbidden':
        return Response({'detail': str(error), 'reason': error.reason}, status=code)
    return Response({'error': str(error), 'reason': error.reason}, status=code)


class BookingPagination(PageNumberPagination):
    page_size = getattr(settings, 'BOOKINGS_PAGE_SIZE', 20)
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema_view(
    list=extend_schema(description="Lista las reservas visibles para el usuario, con filtros y búsqueda."),
    retrieve=extend_schema(description="Detalle de una reserva."),
    create=extend_schema(request=BookingWriteSerializer, responses={201: BookingSerializer},
                         description="Crea una reserva en estado requested / pending."),
    update=extend_schema(request=BookingWriteSerializer, responses={200: BookingSerializer},
                         description="Actualiza los datos de una reserva (no su estado)."),
    partial_update=extend_schema(request=BookingWriteSerializer, responses={200: BookingSerializer},
                                 description="Actualiza parcialmente los datos de una reserva."),
    destroy=extend_schema(description="Elimina definitivamente una reserva."),
)
class BookingViewSet(AuditLoggingMixin, viewsets.ModelViewSet):
    serializer_class = BookingSerializer
    permission_classes = [CatalogPermission, CanEditBooking]
    catalog_resource = 'bookings'
    catalog_action_map = {
        'transition': 'edit',
        'bulk_transition': 'edit',
        'payment': 'payment',
        'bulk_payment': 'payment',
        'bulk_delete': 'delete',
        'statuses': 'list',
    }
    audit_source = 'BOOKINGS'
    pagination_class = BookingPagination

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = BookingFilter
    search_fields = [
        'customer__first_name', 'customer__last_name', 'customer__email', 'customer__phone',
        'therapist__first_name', 'therapist__last_name', 'service__name',
    ]
    ordering_fields = ['booking_time', 'created_at', 'price', 'status']
    ordering = ['-booking_time']

    def get_queryset(self):
        queryset = Booking.objects.select_related('customer', 'therapist', 'service')
        lifecycle = self.lifecycle
        if lifecycle.can(caps.VIEW_ALL_BOOKINGS):
            return queryset
        if lifecycle.can(caps.VIEW_OWN_BOOKINGS):
            return queryset.filter(therapist__user=self.request.user)
        return queryset.none()

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return BookingWriteSerializer
        return BookingSerializer

    @property
    def lifecycle(self):
        return BookingLifecycle(self.request.user)

    def _audit(self, action, booking_id, description, extra_data=None):
        create_audit_log(
            user=self.request.user,
            action=action,
            description=description,
            request=self.request,
            source=self.audit_source,
            extra_data={'booking_id': booking_id, **(extra_data or {})},
        )

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = self.lifecycle.create(**serializer.validated_data)
        except LifecycleError as e:
            return lifecycle_error_response(e)
        self.log_action('create', booking)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return Response(BookingSerializer(serializer.instance).data)

    def destroy(self, request, *args, **kwargs):
        booking = self.get_object()
        try:
            self.lifecycle.delete(booking.pk)
        except LifecycleError as e:
            return lifecycle_error_response(e)
        self._audit('DELETE', booking.pk, f"Reserva {booking.pk} eliminada")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=TransitionSerializer, responses={200: BookingSerializer})
    @action(detail=True, methods=['post'])
    def transition(self, request, pk=None):
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data['status']
        try:
            booking = self.lifecycle.transition(pk, target)
        except LifecycleError as e:
            return lifecycle_error_response(e)
        self._audit('STATUS_CHANGE', booking.pk, f"Reserva {booking.pk} → {target}", {'status': target})
        return Response(BookingSerializer(booking).data)

    @extend_schema(request=BulkTransitionSerializer, responses={200: BatchResultSerializer})
    @action(detail=False, methods=['post'], url_path='bulk-transition')
    def bulk_transition(self, request):
        serializer = BulkTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data['status']
        result = self.lifecycle.bulk_transition(serializer.validated_data['ids'], target)
        for booking_id in result.success:
            self._audit('STATUS_CHANGE', booking_id, f"Reserva {booking_id} → {target}",
                        {'status': target, 'bulk': True})
        logger.info(f"Cambio masivo a {target}: {len(result.success)} ok, {len(result.failed)} fallidas")
        return Response(result.to_dict())

    @extend_schema(request=PaymentStatusSerializer, responses={200: BookingSerializer})
    @action(detail=True, methods=['post'])
    def payment(self, request, pk=None):
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data['payment_status']
        try:
            booking = self.lifecycle.set_payment_status(pk, target)
        except LifecycleError as e:
            return lifecycle_error_response(e)
        self._audit('PAYMENT_CHANGE', booking.pk, f"Pago de la reserva {booking.pk} → {target}",
                    {'payment_status': target})
        return Response(BookingSerializer(booking).data)

    @extend_schema(request=BulkPaymentStatusSerializer, responses={200: BatchResultSerializer})
    @action(detail=False, methods=['post'], url_path='bulk-payment')
    def bulk_payment(self, request):
        serializer = BulkPaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = serializer.validated_data['payment_status']
        result = self.lifecycle.bulk_payment_status(serializer.validated_data['ids'], target)
        for booking_id in result.success:
            self._audit('PAYMENT_CHANGE', booking_id, f"Pago de la reserva {booking_id} → {target}",
                        {'payment_status': target, 'bulk': True})
        return Response(result.to_dict())

    @extend_schema(request=BookingIdsSerializer, responses={200: BatchResultSerializer})
    @action(detail=False, methods=['post'], url_path='bulk-delete')
    def bulk_delete(self, request):
        serializer = BookingIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.lifecycle.bulk_delete(serializer.validated_data['ids'])
        for booking_id in result.success:
            self._audit('DELETE', booking_id, f"Reserva {booking_id} eliminada", {'bulk': True})
        return Response(result.to_dict())

    @action(detail=False, methods=['get'])
    def statuses(self, request):
        """Estados, colores de presentación y tabla de transiciones"""
        return Response({
            'statuses': [{
                'value': value,
                'label': label,
                'color': STATUS_COLORS[value],
                'terminal': value in TERMINAL_STATUSES,
                'transitions': sorted(STATUS_TRANSITIONS[value]),
            } for value, label in BookingStatus.choices],
            'payment_statuses': [{
                'value': value,
                'label': label,
                'color': PAYMENT_COLORS[value],
            } for value, label in PaymentStatus.choices],
            'can_override_terminal': self.lifecycle.can(caps.OVERRIDE_TERMINAL_STATUS),
            'can_manage_payments': self.lifecycle.can(caps.MANAGE_PAYMENTS),
        })
