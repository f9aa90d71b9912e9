import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.audit_api.mixins import AuditLoggingMixin
from apps.audit_api.utils import create_audit_log
from apps.roles_api.models import Role
from apps.roles_api.permission_config import EDIT_OWN_PROFILE
from apps.roles_api.permissions import CatalogPermission, capability_permission_for

from .models import TherapistAvailability, TherapistProfile, TherapistService
from .serializers import (
    MyProfileSerializer, TherapistAvailabilitySerializer, TherapistLookupSerializer,
    TherapistPhotoUploadSerializer, TherapistProfileSerializer, TherapistServiceSerializer,
)
from .storage import upload_therapist_photo

logger = logging.getLogger(__name__)

# Altas, cambios y bajas de disponibilidad/servicios cuentan como editar al terapeuta
THERAPIST_CHILD_ACTIONS = {
    'create': 'edit',
    'update': 'edit',
    'partial_update': 'edit',
    'destroy': 'edit',
}


@extend_schema_view(
    list=extend_schema(description="Lista los terapeutas."),
    retrieve=extend_schema(description="Detalle de un terapeuta."),
    create=extend_schema(description="Crea un terapeuta."),
    update=extend_schema(description="Actualiza un terapeuta."),
    partial_update=extend_schema(description="Actualiza parcialmente un terapeuta."),
    destroy=extend_schema(description="Elimina un terapeuta."),
)
class TherapistProfileViewSet(AuditLoggingMixin, viewsets.ModelViewSet):
    queryset = TherapistProfile.objects.all().select_related('user')
    serializer_class = TherapistProfileSerializer
    permission_classes = [CatalogPermission]
    catalog_resource = 'therapist_profiles'
    catalog_action_map = {'lookups': 'list', 'photo': 'edit'}
    audit_source = 'THERAPISTS'

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active', 'specialty']
    search_fields = ['first_name', 'last_name', 'email', 'phone', 'specialty']
    ordering_fields = ['first_name', 'years_experience', 'created_at']
    ordering = ['first_name']

    @action(detail=False, methods=['get'])
    def lookups(self, request):
        """Terapeutas activos ordenados por nombre, para selectores y filtros"""
        therapists = TherapistProfile.objects.filter(is_active=True).order_by('first_name')
        return Response(TherapistLookupSerializer(therapists, many=True).data)

    @extend_schema(request=TherapistPhotoUploadSerializer, responses={200: TherapistProfileSerializer})
    @action(detail=True, methods=['post'], parser_classes=[MultiPartParser, FormParser])
    def photo(self, request, pk=None):
        therapist = self.get_object()
        return _save_photo(request, therapist)


class TherapistAvailabilityViewSet(AuditLoggingMixin, viewsets.ModelViewSet):
    queryset = TherapistAvailability.objects.all().select_related('therapist')
    serializer_class = TherapistAvailabilitySerializer
    permission_classes = [CatalogPermission]
    catalog_resource = 'therapist_profiles'
    catalog_action_map = THERAPIST_CHILD_ACTIONS
    audit_source = 'THERAPISTS'
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['therapist', 'day_of_week']


class TherapistServiceViewSet(AuditLoggingMixin, viewsets.ModelViewSet):
    queryset = TherapistService.objects.all().select_related('therapist', 'service')
    serializer_class = TherapistServiceSerializer
    permission_classes = [CatalogPermission]
    catalog_resource = 'therapist_profiles'
    catalog_action_map = THERAPIST_CHILD_ACTIONS
    audit_source = 'THERAPISTS'
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['therapist', 'service']


def _save_photo(request, therapist):
    upload = TherapistPhotoUploadSerializer(data=request.data)
    upload.is_valid(raise_exception=True)

    therapist.profile_pic = upload_therapist_photo(therapist, upload.validated_data['photo'], request)
    therapist.save(update_fields=['profile_pic', 'updated_at'])

    create_audit_log(
        user=request.user,
        action='UPDATE',
        description=f"Foto actualizada para {therapist}",
        content_object=therapist,
        request=request,
        source='THERAPISTS',
    )
    return Response(TherapistProfileSerializer(therapist).data)


class MyProfileView(APIView):
    """
    Perfil del terapeuta autenticado.

    Exige la capacidad edit_own_profile y además el rol therapist: los
    administradores también editan su perfil pero no tienen ficha de terapeuta.
    """
    permission_classes = [capability_permission_for(EDIT_OWN_PROFILE, role=Role.THERAPIST)]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_object(self):
        try:
            return TherapistProfile.objects.get(user=self.request.user)
        except TherapistProfile.DoesNotExist:
            raise NotFound('No tienes un perfil de terapeuta asociado.')

    @extend_schema(responses={200: MyProfileSerializer})
    def get(self, request):
        return Response(MyProfileSerializer(self.get_object()).data)

    @extend_schema(request=MyProfileSerializer, responses={200: MyProfileSerializer})
    def patch(self, request):
        profile = self.get_object()
        serializer = MyProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        create_audit_log(
            user=request.user,
            action='UPDATE',
            description=f"Perfil propio actualizado: {profile}",
            content_object=profile,
            request=request,
            source='THERAPISTS',
        )
        return Response(serializer.data, status=status.HTTP_200_OK)


class MyProfilePhotoView(MyProfileView):
    parser_classes = [MultiPartParser, FormParser]
    http_method_names = ['post', 'options']

    @extend_schema(request=TherapistPhotoUploadSerializer, responses={200: TherapistProfileSerializer})
    def post(self, request):
        return _save_photo(request, self.get_object())
