from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models
from django.utils import timezone


class AuditLog(models.Model):
    """Registro de actividad de la consola (CRUD, cambios de estado y acciones de administración)"""

    ACTION_CHOICES = [
        ('CREATE', 'Creación'),
        ('UPDATE', 'Actualización'),
        ('DELETE', 'Eliminación'),
        ('VIEW', 'Visualización'),
        ('STATUS_CHANGE', 'Cambio de estado'),
        ('PAYMENT_CHANGE', 'Cambio de estado de pago'),
        ('ROLE_ASSIGN', 'Asignación de rol'),
        ('SETTING_UPDATE', 'Actualización de configuración'),
        ('ADMIN_ACTION', 'Acción administrativa'),
        ('SYSTEM_ERROR', 'Error del sistema'),
    ]

    SOURCE_CHOICES = [
        ('AUTH', 'Autenticación'),
        ('ROLES', 'Roles y permisos'),
        ('BOOKINGS', 'Reservas'),
        ('THERAPISTS', 'Terapeutas'),
        ('CUSTOMERS', 'Clientes'),
        ('SERVICES', 'Servicios'),
        ('SETTINGS', 'Configuración'),
        ('SYSTEM', 'Sistema'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="Usuario que realizó la acción"
    )
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    description = models.TextField()

    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE, null=True, blank=True)
    object_id = models.PositiveIntegerField(null=True, blank=True)
    content_object = GenericForeignKey('content_type', 'object_id')

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    extra_data = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)
    source = models.CharField(max_length=50, choices=SOURCE_CHOICES, default='SYSTEM')

    class Meta:
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['timestamp'], name='audit_timestamp_idx'),
            models.Index(fields=['user', 'timestamp'], name='audit_user_ts_idx'),
            models.Index(fields=['action', 'timestamp'], name='audit_action_ts_idx'),
            models.Index(fields=['content_type', 'object_id'], name='audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.user} - {self.action} - {self.timestamp}"
