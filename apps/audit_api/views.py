from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.roles_api.permissions import CatalogPermission

from .models import AuditLog
from .serializers import AuditLogSerializer


@extend_schema_view(
    list=extend_schema(description="Registro de actividad de la consola."),
    retrieve=extend_schema(description="Detalle de una entrada del registro de actividad."),
)
class AuditLogViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = AuditLog.objects.all().select_related('user', 'content_type')
    serializer_class = AuditLogSerializer
    permission_classes = [CatalogPermission]
    catalog_resource = 'activity-logs'
    catalog_action_map = {'actions': 'list', 'sources': 'list'}

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['action', 'source', 'user']
    search_fields = ['description', 'user__email', 'user__full_name']
    ordering_fields = ['timestamp', 'action', 'source']
    ordering = ['-timestamp']

    def get_queryset(self):
        """Permite filtrar por rango de fechas"""
        queryset = super().get_queryset()

        date_from = self.request.query_params.get('date_from')
        if date_from:
            queryset = queryset.filter(timestamp__date__gte=date_from)

        date_to = self.request.query_params.get('date_to')
        if date_to:
            queryset = queryset.filter(timestamp__date__lte=date_to)

        return queryset

    @action(detail=False, methods=['get'])
    def actions(self, request):
        """Lista de acciones registrables"""
        return Response([{'value': value, 'label': label} for value, label in AuditLog.ACTION_CHOICES])

    @action(detail=False, methods=['get'])
    def sources(self, request):
        """Lista de orígenes de registro"""
        return Response([{'value': value, 'label': label} for value, label in AuditLog.SOURCE_CHOICES])
