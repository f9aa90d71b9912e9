from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import AuditLog

User = get_user_model()


class AuditUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'role']


class AuditLogSerializer(serializers.ModelSerializer):
    user = AuditUserSerializer(read_only=True)
    content_type_name = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            'id',
            'user',
            'action',
            'description',
            'content_type',
            'content_type_name',
            'object_id',
            'ip_address',
            'user_agent',
            'extra_data',
            'timestamp',
            'source',
        ]
        read_only_fields = fields

    def get_content_type_name(self, obj):
        if obj.content_type:
            return obj.content_type.model
        return None
