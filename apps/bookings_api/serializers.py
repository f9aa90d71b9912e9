from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied

from apps.roles_api import permission_config as caps

from .lifecycle import BookingLifecycle
from .models import Booking, BookingStatus, PaymentStatus

LIFECYCLE_FIELDS = ('status', 'payment_status')

# Sólo con edit_all_bookings; edit_own_bookings no reasigna ni cambia importes
ASSIGNMENT_FIELDS = ('customer', 'therapist', 'price', 'therapist_fee')


class BookingSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.full_name', read_only=True)
    customer_email = serializers.EmailField(source='customer.email', read_only=True)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True)
    therapist_name = serializers.CharField(source='therapist.full_name', read_only=True, default=None)
    service_name = serializers.CharField(source='service.name', read_only=True, default=None)

    class Meta:
        model = Booking
        fields = ['id', 'customer', 'customer_name', 'customer_email', 'customer_phone',
                  'therapist', 'therapist_name', 'service', 'service_name', 'booking_time',
                  'status', 'payment_status', 'price', 'therapist_fee', 'address', 'notes',
                  'created_at', 'updated_at']
        read_only_fields = fields


class BookingWriteSerializer(serializers.ModelSerializer):
    """Alta y edición de datos de la reserva. El estado sólo cambia con las acciones del ciclo de vida."""

    class Meta:
        model = Booking
        fields = ['id', 'customer', 'therapist', 'service', 'booking_time', 'price', 'therapist_fee',
                  'address', 'notes']

    def to_internal_value(self, data):
        touched = [name for name in LIFECYCLE_FIELDS if name in data]
        if touched:
            raise serializers.ValidationError({
                name: 'Este campo sólo se modifica con las acciones de transición.' for name in touched
            })

        if self.instance is not None:
            self._check_assignment_fields(data)
        return super().to_internal_value(data)

    def _check_assignment_fields(self, data):
        request = self.context.get('request')
        if request is None or BookingLifecycle(request.user).can(caps.EDIT_ALL_BOOKINGS):
            return
        touched = sorted(name for name in ASSIGNMENT_FIELDS if name in data)
        if touched:
            raise PermissionDenied(f"No tienes permiso para modificar: {', '.join(touched)}.")

    def validate(self, attrs):
        price = attrs.get('price', getattr(self.instance, 'price', None))
        fee = attrs.get('therapist_fee', getattr(self.instance, 'therapist_fee', None))
        if price is not None and fee is not None and fee > price:
            raise serializers.ValidationError({'therapist_fee': 'El pago al terapeuta no puede superar el precio.'})
        return attrs


class TransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.choices)


class PaymentStatusSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices)


class BookingIdsSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=500)


class BulkTransitionSerializer(BookingIdsSerializer):
    status = serializers.ChoiceField(choices=BookingStatus.choices)


class BulkPaymentStatusSerializer(BookingIdsSerializer):
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices)


class BatchResultSerializer(serializers.Serializer):
    success = serializers.ListField(child=serializers.IntegerField())
    failed = serializers.ListField(child=serializers.IntegerField())
    errors = serializers.DictField(child=serializers.CharField())
    counts = serializers.DictField(child=serializers.IntegerField())
