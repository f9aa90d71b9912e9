from decimal import Decimal

from django.conf import settings as django_settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class SystemSettings(models.Model):
    """Configuración global de la consola (una sola fila, pk=1)"""
    business_name = models.CharField(_("Nombre del negocio"), max_length=255, default="Rejuvenators")
    support_email = models.EmailField(_("Email de soporte"), default="admin@rejuvenators.com")
    phone_number = models.CharField(_("Teléfono"), max_length=50, blank=True)
    default_currency = models.CharField(_("Moneda por defecto"), max_length=10, default="AUD")
    timezone = models.CharField(_("Zona horaria"), max_length=100, default="Australia/Brisbane")

    # Reservas
    booking_response_timeout_minutes = models.PositiveIntegerField(
        _("Minutos para que el terapeuta responda antes de reasignar"),
        default=60,
        validators=[MinValueValidator(5), MaxValueValidator(24 * 60)]
    )
    default_therapist_fee_percentage = models.DecimalField(
        _("Pago al terapeuta por defecto (%)"),
        max_digits=5,
        decimal_places=2,
        default=Decimal('50.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    min_booking_notice_hours = models.PositiveIntegerField(_("Antelación mínima (horas)"), default=2)

    # Sistema
    maintenance_mode = models.BooleanField(_("Modo mantenimiento"), default=False)
    email_notifications = models.BooleanField(_("Notificaciones por email"), default=True)

    updated_by = models.ForeignKey(
        django_settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Configuración del sistema")
        verbose_name_plural = _("Configuración del sistema")

    def __str__(self):
        return f"Configuración del Sistema - {self.business_name}"

    @classmethod
    def get_settings(cls):
        """Obtener o crear la configuración del sistema"""
        settings, _created = cls.objects.get_or_create(pk=1)
        return settings
