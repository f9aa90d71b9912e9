from django.core.validators import MinValueValidator
from django.db import models

from apps.customers_api.models import Customer
from apps.services_api.models import Service
from apps.therapists_api.models import TherapistProfile


class BookingStatus(models.TextChoices):
    REQUESTED = 'requested', 'Requested'
    CONFIRMED = 'confirmed', 'Confirmed'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    DECLINED = 'declined', 'Declined'
    TIMEOUT_REASSIGNED = 'timeout_reassigned', 'Timeout Reassigned'
    SEEKING_ALTERNATE = 'seeking_alternate', 'Seeking Alternate'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    REFUNDED = 'refunded', 'Refunded'


class Booking(models.Model):
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name='bookings')
    therapist = models.ForeignKey(
        TherapistProfile, on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings'
    )
    service = models.ForeignKey(Service, on_delete=models.SET_NULL, null=True, blank=True, related_name='bookings')
    booking_time = models.DateTimeField()

    # Sólo el motor de ciclo de vida (lifecycle.BookingLifecycle) escribe estos dos campos
    status = models.CharField(max_length=20, choices=BookingStatus.choices, default=BookingStatus.REQUESTED)
    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)

    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    therapist_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    address = models.TextField()
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Reserva'
        verbose_name_plural = 'Reservas'
        ordering = ['-booking_time']
        indexes = [
            models.Index(fields=['status'], name='booking_status_idx'),
            models.Index(fields=['payment_status'], name='booking_payment_idx'),
            models.Index(fields=['booking_time'], name='booking_time_idx'),
        ]

    def __str__(self):
        return f'{self.customer} with {self.therapist} at {self.booking_time}'
