"""
Audit logging mixin for Django REST Framework ViewSets.
Logs create/update/destroy through create_audit_log.
"""
from .utils import create_audit_log


class AuditLoggingMixin:
    """
    Mixin that logs write operations of a ModelViewSet.

    Set `audit_source` on the view to tag the entries (defaults to 'SYSTEM').
    """
    audit_source = 'SYSTEM'

    # No usar 'action_map': DRF ya lo asigna en cada instancia de ViewSet
    audit_actions = {
        'create': 'CREATE',
        'update': 'UPDATE',
        'partial_update': 'UPDATE',
        'destroy': 'DELETE',
    }

    def log_action(self, action, instance, extra_data=None):
        description = f"{action} {instance.__class__.__name__}: {instance}"
        create_audit_log(
            user=self.request.user,
            action=self.audit_actions.get(action, 'UPDATE'),
            description=description,
            content_object=instance,
            request=self.request,
            source=self.audit_source,
            extra_data={
                'view_action': action,
                'model_name': instance.__class__.__name__,
                **(extra_data or {}),
            }
        )

    def perform_create(self, serializer):
        instance = serializer.save()
        self.log_action('create', instance)
        return instance

    def perform_update(self, serializer):
        instance = serializer.save()
        self.log_action('update', instance)
        return instance

    def perform_destroy(self, instance):
        # Se registra antes de borrar para conservar content_type/object_id
        self.log_action('destroy', instance)
        instance.delete()
