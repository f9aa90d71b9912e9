from drf_spectacular.utils import extend_schema
from rest_framework import generics, response, status, views

from apps.audit_api.utils import create_audit_log
from apps.roles_api.permission_config import ACCESS_SYSTEM_SETTINGS
from apps.roles_api.permissions import capability_permission_for

from .models import SystemSettings
from .serializers import SystemSettingsSerializer
from .utils import clear_system_config_cache, get_system_config


class SystemSettingsRetrieveUpdateView(generics.RetrieveUpdateAPIView):
    """Vista para obtener y actualizar configuraciones globales del sistema"""
    serializer_class = SystemSettingsSerializer
    permission_classes = [capability_permission_for(ACCESS_SYSTEM_SETTINGS)]

    def get_object(self):
        if self.request.method == 'GET':
            return get_system_config()
        return SystemSettings.get_settings()

    def perform_update(self, serializer):
        instance = serializer.save(updated_by=self.request.user)
        clear_system_config_cache()
        create_audit_log(
            user=self.request.user,
            action='SETTING_UPDATE',
            description="Configuración del sistema actualizada",
            content_object=instance,
            request=self.request,
            source='SETTINGS',
            extra_data={'fields': sorted(serializer.validated_data.keys())},
        )


class SystemSettingsResetView(views.APIView):
    """Vista para restablecer configuraciones a valores por defecto"""
    permission_classes = [capability_permission_for(ACCESS_SYSTEM_SETTINGS)]

    @extend_schema(request=None, responses={200: SystemSettingsSerializer})
    def post(self, request, *args, **kwargs):
        SystemSettings.objects.all().delete()
        clear_system_config_cache()
        settings = SystemSettings.get_settings()
        create_audit_log(
            user=request.user,
            action='SETTING_UPDATE',
            description="Configuración del sistema restablecida",
            content_object=settings,
            request=request,
            source='SETTINGS',
        )
        return response.Response(SystemSettingsSerializer(settings).data, status=status.HTTP_200_OK)
