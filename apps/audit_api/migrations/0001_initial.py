import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('contenttypes', '0002_remove_content_type_name'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('CREATE', 'Creación'), ('UPDATE', 'Actualización'), ('DELETE', 'Eliminación'), ('VIEW', 'Visualización'), ('STATUS_CHANGE', 'Cambio de estado'), ('PAYMENT_CHANGE', 'Cambio de estado de pago'), ('ROLE_ASSIGN', 'Asignación de rol'), ('SETTING_UPDATE', 'Actualización de configuración'), ('ADMIN_ACTION', 'Acción administrativa'), ('SYSTEM_ERROR', 'Error del sistema')], max_length=50)),
                ('description', models.TextField()),
                ('object_id', models.PositiveIntegerField(blank=True, null=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True)),
                ('extra_data', models.JSONField(blank=True, default=dict)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now)),
                ('source', models.CharField(choices=[('AUTH', 'Autenticación'), ('ROLES', 'Roles y permisos'), ('BOOKINGS', 'Reservas'), ('THERAPISTS', 'Terapeutas'), ('CUSTOMERS', 'Clientes'), ('SERVICES', 'Servicios'), ('SETTINGS', 'Configuración'), ('SYSTEM', 'Sistema')], default='SYSTEM', max_length=50)),
                ('content_type', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to='contenttypes.contenttype')),
                ('user', models.ForeignKey(blank=True, help_text='Usuario que realizó la acción', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['timestamp'], name='audit_timestamp_idx'),
                    models.Index(fields=['user', 'timestamp'], name='audit_user_ts_idx'),
                    models.Index(fields=['action', 'timestamp'], name='audit_action_ts_idx'),
                    models.Index(fields=['content_type', 'object_id'], name='audit_object_idx'),
                ],
            },
        ),
    ]
