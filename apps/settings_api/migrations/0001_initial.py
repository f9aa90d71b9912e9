import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SystemSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('business_name', models.CharField(default='Rejuvenators', max_length=255, verbose_name='Nombre del negocio')),
                ('support_email', models.EmailField(default='admin@rejuvenators.com', max_length=254, verbose_name='Email de soporte')),
                ('phone_number', models.CharField(blank=True, max_length=50, verbose_name='Teléfono')),
                ('default_currency', models.CharField(default='AUD', max_length=10, verbose_name='Moneda por defecto')),
                ('timezone', models.CharField(default='Australia/Brisbane', max_length=100, verbose_name='Zona horaria')),
                ('booking_response_timeout_minutes', models.PositiveIntegerField(default=60, validators=[django.core.validators.MinValueValidator(5), django.core.validators.MaxValueValidator(1440)], verbose_name='Minutos para que el terapeuta responda antes de reasignar')),
                ('default_therapist_fee_percentage', models.DecimalField(decimal_places=2, default=Decimal('50.00'), max_digits=5, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)], verbose_name='Pago al terapeuta por defecto (%)')),
                ('min_booking_notice_hours', models.PositiveIntegerField(default=2, verbose_name='Antelación mínima (horas)')),
                ('maintenance_mode', models.BooleanField(default=False, verbose_name='Modo mantenimiento')),
                ('email_notifications', models.BooleanField(default=True, verbose_name='Notificaciones por email')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Configuración del sistema',
                'verbose_name_plural': 'Configuración del sistema',
            },
        ),
    ]
