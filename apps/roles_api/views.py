from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.audit_api.utils import create_audit_log

from .permission_checker import PermissionChecker, role_of
from .permission_config import MANAGE_USERS, PERMISSION_CAPABILITIES, ROLE_PERMISSIONS
from .permissions import capability_permission_for
from .resources import build_resource_catalog
from .serializers import (
    CapabilitySerializer, ResourceDescriptorSerializer, RoleCapabilitiesSerializer,
)


class AccessViewSet(viewsets.ViewSet):
    """Lo que el usuario autenticado puede ver y hacer en la consola."""
    permission_classes = [IsAuthenticated]

    @extend_schema(
        responses={200: RoleCapabilitiesSerializer},
        description="Rol del usuario actual y su lista de capacidades."
    )
    def capabilities(self, request):
        data = {
            'role': role_of(request.user),
            'capabilities': PermissionChecker.get_user_capabilities(request.user),
        }
        return Response(RoleCapabilitiesSerializer(data).data)

    @extend_schema(
        responses={200: ResourceDescriptorSerializer(many=True)},
        description="Recursos navegables para el rol del usuario actual, en orden de menú."
    )
    def resources(self, request):
        catalog = build_resource_catalog(role_of(request.user))
        return Response({'results': ResourceDescriptorSerializer(catalog, many=True).data})


class PermissionMatrixViewSet(viewsets.ViewSet):
    permission_classes = [capability_permission_for(MANAGE_USERS)]

    @extend_schema(description="Catálogo de capacidades y matriz completa rol → capacidades.")
    def list(self, request):
        catalog = [
            {'codename': codename, **config}
            for codename, config in sorted(PERMISSION_CAPABILITIES.items())
        ]
        matrix = {str(role): sorted(granted) for role, granted in ROLE_PERMISSIONS.items()}
        create_audit_log(
            user=request.user,
            action='ADMIN_ACTION',
            description='Consulta de la matriz de permisos',
            request=request,
            source='ROLES',
        )
        return Response({
            'capabilities': CapabilitySerializer(catalog, many=True).data,
            'matrix': matrix,
        })
