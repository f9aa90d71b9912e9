from django.db import models


class Role(models.TextChoices):
    """Roles fijos de la consola. Un usuario sin rol no tiene ningún permiso."""
    SUPER_ADMIN = 'super_admin', 'Super Admin'
    ADMIN = 'admin', 'Admin'
    THERAPIST = 'therapist', 'Therapist'
    CUSTOMER = 'customer', 'Customer'

