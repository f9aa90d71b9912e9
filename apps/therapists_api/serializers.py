from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.roles_api.models import Role
from apps.services_api.models import Service

from .models import TherapistAvailability, TherapistProfile, TherapistService
from .storage import optimized_image_url

User = get_user_model()

PHOTO_SIZES = {
    'thumbnail': (128, 128),
    'display': (400, 400),
}


class TherapistProfileSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role=Role.THERAPIST), required=False, allow_null=True
    )
    photo_urls = serializers.SerializerMethodField()

    class Meta:
        model = TherapistProfile
        fields = ['id', 'user', 'first_name', 'last_name', 'full_name', 'email', 'phone', 'specialty',
                  'bio', 'years_experience', 'profile_pic', 'photo_urls', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['profile_pic', 'created_at', 'updated_at']

    def get_photo_urls(self, obj):
        if not obj.profile_pic:
            return None
        return {
            name: optimized_image_url(obj.profile_pic, width, height)
            for name, (width, height) in PHOTO_SIZES.items()
        }


class MyProfileSerializer(TherapistProfileSerializer):
    """El terapeuta edita sus datos de contacto y su presentación, no su vínculo con el usuario."""

    class Meta(TherapistProfileSerializer.Meta):
        read_only_fields = ['user', 'email', 'is_active', 'profile_pic', 'created_at', 'updated_at']


class TherapistPhotoUploadSerializer(serializers.Serializer):
    photo = serializers.FileField()


class TherapistLookupSerializer(serializers.ModelSerializer):
    class Meta:
        model = TherapistProfile
        fields = ['id', 'first_name', 'last_name']


class TherapistAvailabilitySerializer(serializers.ModelSerializer):
    day_name = serializers.CharField(source='get_day_of_week_display', read_only=True)

    class Meta:
        model = TherapistAvailability
        fields = ['id', 'therapist', 'day_of_week', 'day_name', 'start_time', 'end_time', 'created_at']
        read_only_fields = ['created_at']

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start and end and end <= start:
            raise serializers.ValidationError({'end_time': 'La hora de fin debe ser posterior a la de inicio.'})
        return attrs


class TherapistServiceSerializer(serializers.ModelSerializer):
    service_name = serializers.CharField(source='service.name', read_only=True)
    service = serializers.PrimaryKeyRelatedField(queryset=Service.objects.filter(is_active=True))

    class Meta:
        model = TherapistService
        fields = ['id', 'therapist', 'service', 'service_name', 'created_at']
        read_only_fields = ['created_at']
