import logging

from django.contrib.auth import get_user_model
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.audit_api.mixins import AuditLoggingMixin
from apps.audit_api.utils import create_audit_log
from apps.roles_api.models import Role
from apps.roles_api.permissions import CatalogPermission

from .serializers import MeSerializer, UserListSerializer, UserWriteSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class MeView(APIView):
    """Identidad resuelta del usuario autenticado"""
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeSerializer})
    def get(self, request):
        return Response(MeSerializer(request.user).data)


@extend_schema_view(
    list=extend_schema(description="Lista los usuarios de la consola."),
    retrieve=extend_schema(description="Detalle de un usuario."),
    create=extend_schema(description="Crea un usuario y le asigna un rol."),
    update=extend_schema(description="Actualiza un usuario (incluido su rol)."),
    partial_update=extend_schema(description="Actualiza parcialmente un usuario."),
    destroy=extend_schema(description="Elimina un usuario."),
)
class UserViewSet(AuditLoggingMixin, viewsets.ModelViewSet):
    queryset = User.objects.all().order_by('email')
    permission_classes = [CatalogPermission]
    catalog_resource = 'user-management'
    audit_source = 'AUTH'

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['role', 'is_active']
    search_fields = ['email', 'full_name', 'phone']
    ordering_fields = ['email', 'full_name', 'date_joined']

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return UserWriteSerializer
        return UserListSerializer

    def perform_update(self, serializer):
        previous_role = serializer.instance.role
        instance = super().perform_update(serializer)
        if instance.role != previous_role:
            logger.info(f"Rol de {instance.email} cambiado de {previous_role} a {instance.role} "
                        f"por {self.request.user.email}")
            create_audit_log(
                user=self.request.user,
                action='ROLE_ASSIGN',
                description=f"Rol de {instance.email}: {previous_role} → {instance.role}",
                content_object=instance,
                request=self.request,
                source='ROLES',
                extra_data={'previous_role': previous_role, 'role': instance.role},
            )
        return instance

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()

        if instance.pk == request.user.pk:
            return Response({'error': 'No puedes eliminar tu propio usuario'},
                            status=status.HTTP_400_BAD_REQUEST)

        if instance.role == Role.SUPER_ADMIN and User.objects.filter(role=Role.SUPER_ADMIN).count() <= 1:
            return Response({'error': 'No se puede eliminar el último super admin'},
                            status=status.HTTP_400_BAD_REQUEST)

        self.perform_destroy(instance)
        return Response(status=status.HTTP_204_NO_CONTENT)
