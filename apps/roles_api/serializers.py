from rest_framework import serializers

from .models import Role


class CapabilitySerializer(serializers.Serializer):
    codename = serializers.CharField()
    description = serializers.CharField()
    endpoints = serializers.ListField(child=serializers.CharField())
    methods = serializers.ListField(child=serializers.CharField())


class RoleCapabilitiesSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices, allow_null=True)
    capabilities = serializers.ListField(child=serializers.CharField())


class ResourceMetaSerializer(serializers.Serializer):
    label = serializers.CharField()
    icon = serializers.CharField()
    canDelete = serializers.BooleanField()


class ResourceDescriptorSerializer(serializers.Serializer):
    """Forma que espera el menú de la consola: name, list, show?, edit?, create?, meta."""
    name = serializers.CharField()
    list = serializers.CharField()
    show = serializers.CharField(required=False)
    edit = serializers.CharField(required=False)
    create = serializers.CharField(required=False)
    meta = ResourceMetaSerializer()

    def to_representation(self, instance):
        return instance.to_dict()
