from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.audit_api.mixins import AuditLoggingMixin
from apps.roles_api.permissions import CatalogPermission

from .models import Service
from .serializers import ServiceLookupSerializer, ServiceSerializer


@extend_schema_view(
    list=extend_schema(description="Lista los servicios de masaje."),
    retrieve=extend_schema(description="Detalle de un servicio."),
    create=extend_schema(description="Crea un servicio."),
    update=extend_schema(description="Actualiza un servicio."),
    partial_update=extend_schema(description="Actualiza parcialmente un servicio."),
    destroy=extend_schema(description="Elimina un servicio."),
)
class ServiceViewSet(AuditLoggingMixin, viewsets.ModelViewSet):
    queryset = Service.objects.all()
    serializer_class = ServiceSerializer
    permission_classes = [CatalogPermission]
    catalog_resource = 'services'
    catalog_action_map = {'lookups': 'list', 'categories': 'list'}
    audit_source = 'SERVICES'

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active', 'category']
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'duration']
    ordering = ['name']

    @action(detail=False, methods=['get'])
    def lookups(self, request):
        """Servicios activos ordenados por nombre, para selectores"""
        services = Service.objects.filter(is_active=True).order_by('name')
        return Response(ServiceLookupSerializer(services, many=True).data)

    @action(detail=False, methods=['get'])
    def categories(self, request):
        categories = (
            Service.objects.filter(category__isnull=False)
            .exclude(category='')
            .values_list('category', flat=True)
            .distinct()
            .order_by('category')
        )
        return Response(list(categories))
