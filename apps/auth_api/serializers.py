from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.roles_api.models import Role

User = get_user_model()


class MeSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'role', 'email', 'full_name']
        read_only_fields = fields


class UserListSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'phone', 'role', 'is_active', 'date_joined', 'last_login']
        read_only_fields = ['id', 'date_joined', 'last_login']


class UserWriteSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8, required=False)
    role = serializers.ChoiceField(choices=Role.choices, allow_null=True, required=False)

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'phone', 'role', 'is_active', 'password']

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({'password': 'La contraseña es obligatoria.'})

        new_role = attrs.get('role', getattr(self.instance, 'role', None))
        if self.instance is not None and self.instance.role == Role.SUPER_ADMIN and new_role != Role.SUPER_ADMIN:
            if not User.objects.filter(role=Role.SUPER_ADMIN).exclude(pk=self.instance.pk).exists():
                raise serializers.ValidationError({'role': 'No se puede quitar el rol al último super admin.'})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
