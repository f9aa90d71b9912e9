from datetime import timedelta
from decimal import Decimal

import factory
from django.utils import timezone

from apps.customers_api.factories import CustomerFactory
from apps.services_api.factories import ServiceFactory
from apps.therapists_api.factories import TherapistProfileFactory

from .models import Booking, BookingStatus, PaymentStatus


class BookingFactory(factory.django.DjangoModelFactory):
    """Crea la reserva directamente en la base de datos, sin pasar por el ciclo de vida."""

    class Meta:
        model = Booking

    customer = factory.SubFactory(CustomerFactory)
    therapist = factory.SubFactory(TherapistProfileFactory)
    service = factory.SubFactory(ServiceFactory)
    booking_time = factory.LazyFunction(lambda: timezone.now() + timedelta(days=1))
    status = BookingStatus.REQUESTED
    payment_status = PaymentStatus.PENDING
    price = Decimal('120.00')
    therapist_fee = Decimal('60.00')
    address = factory.Faker('address')
