import django_filters
from rest_framework.exceptions import ValidationError

from .models import Booking


class CharInFilter(django_filters.BaseInFilter, django_filters.CharFilter):
    pass


class BookingFilter(django_filters.FilterSet):
    """
    Filtros del listado de reservas. En status, payment_status, therapist y
    service el valor 'all' equivale a no filtrar.
    """
    status = django_filters.CharFilter(method='filter_or_all')
    payment_status = django_filters.CharFilter(method='filter_or_all')
    therapist = django_filters.CharFilter(method='filter_or_all')
    service = django_filters.CharFilter(method='filter_or_all')
    status__in = CharInFilter(field_name='status', lookup_expr='in')
    date_from = django_filters.DateFilter(field_name='booking_time', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='booking_time', lookup_expr='date__lte')

    class Meta:
        model = Booking
        fields = ['status', 'payment_status', 'therapist', 'service', 'customer']

    def filter_or_all(self, queryset, name, value):
        if not value or value == 'all':
            return queryset
        if name in ('therapist', 'service') and not value.isdigit():
            raise ValidationError({name: f"Valor inválido: '{value}'"})
        return queryset.filter(**{name: value})
