from rest_framework import serializers
from .models import SystemSettings


class SystemSettingsSerializer(serializers.ModelSerializer):
    updated_by_email = serializers.EmailField(source='updated_by.email', read_only=True, default=None)

    class Meta:
        model = SystemSettings
        fields = [
            'business_name', 'support_email', 'phone_number', 'default_currency', 'timezone',
            'booking_response_timeout_minutes', 'default_therapist_fee_percentage', 'min_booking_notice_hours',
            'maintenance_mode', 'email_notifications',
            'updated_by_email', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_timezone(self, value):
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise serializers.ValidationError(f"Zona horaria desconocida: {value}")
        return value
