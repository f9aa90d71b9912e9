from rest_framework import serializers
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Customer
        fields = ['id', 'first_name', 'last_name', 'full_name', 'email', 'phone', 'address', 'notes',
                  'is_active', 'user', 'created_at', 'updated_at']
        read_only_fields = ['user', 'created_at', 'updated_at']

    def validate(self, attrs):
        email = attrs.get('email', getattr(self.instance, 'email', None))
        phone = attrs.get('phone', getattr(self.instance, 'phone', None))
        if not email and not phone:
            raise serializers.ValidationError(
                "Debe proporcionar al menos un medio de contacto: correo electrónico o teléfono."
            )
        return attrs


class CustomerLookupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ['id', 'first_name', 'last_name', 'email', 'phone']
