from django.db.models import Count, Q, Sum
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.audit_api.mixins import AuditLoggingMixin
from apps.roles_api.permissions import CatalogPermission

from .models import Customer
from .serializers import CustomerLookupSerializer, CustomerSerializer


@extend_schema_view(
    list=extend_schema(description="Lista los clientes."),
    retrieve=extend_schema(description="Detalle de un cliente."),
    update=extend_schema(description="Actualiza un cliente."),
    partial_update=extend_schema(description="Actualiza parcialmente un cliente."),
    destroy=extend_schema(description="Elimina un cliente."),
)
class CustomerViewSet(AuditLoggingMixin,
                      mixins.ListModelMixin,
                      mixins.RetrieveModelMixin,
                      mixins.UpdateModelMixin,
                      mixins.DestroyModelMixin,
                      viewsets.GenericViewSet):
    """Los clientes se dan de alta al reservar; desde la consola no se crean."""
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    permission_classes = [CatalogPermission]
    catalog_resource = 'customers'
    catalog_action_map = {'lookups': 'list', 'history': 'show', 'stats': 'show'}
    audit_source = 'CUSTOMERS'

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active']
    search_fields = ['first_name', 'last_name', 'email', 'phone']
    ordering_fields = ['first_name', 'created_at']
    ordering = ['first_name']

    @action(detail=False, methods=['get'])
    def lookups(self, request):
        """Clientes ordenados por nombre, para selectores"""
        customers = Customer.objects.order_by('first_name')
        return Response(CustomerLookupSerializer(customers, many=True).data)

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        customer = self.get_object()
        bookings = customer.bookings.select_related('service', 'therapist').order_by('-booking_time')[:10]
        return Response([{
            'id': booking.id,
            'booking_time': booking.booking_time,
            'status': booking.status,
            'payment_status': booking.payment_status,
            'service': booking.service.name if booking.service else None,
            'therapist': booking.therapist.full_name if booking.therapist else None,
        } for booking in bookings])

    @action(detail=True, methods=['get'])
    def stats(self, request, pk=None):
        customer = self.get_object()
        stats = customer.bookings.aggregate(
            total_bookings=Count('id'),
            completed_bookings=Count('id', filter=Q(status='completed')),
            total_spent=Sum('price', filter=Q(payment_status='paid')),
        )
        return Response({
            'total_bookings': stats['total_bookings'],
            'completed_bookings': stats['completed_bookings'],
            'total_spent': float(stats['total_spent'] or 0),
        })
