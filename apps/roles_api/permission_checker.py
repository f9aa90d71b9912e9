import logging

import sentry_sdk
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .models import Role
from .permission_config import PERMISSION_CAPABILITIES, ROLE_PERMISSIONS

logger = logging.getLogger(__name__)


class UnknownCapabilityError(ImproperlyConfigured):
    """Se pidió una capacidad que no existe en el catálogo."""

    def __init__(self, capability):
        self.capability = capability
        super().__init__(f"Capacidad desconocida: '{capability}'")


def _strict_mode():
    return getattr(settings, 'RBAC_STRICT_CAPABILITIES', settings.DEBUG)


def normalize_role(role):
    """Devuelve el Role correspondiente o None si el valor no es un rol conocido."""
    if not role:
        return None
    try:
        return Role(role)
    except ValueError:
        return None


def can_access(role, capability, matrix=None):
    """
    Decide si un rol tiene una capacidad.

    Sin rol o con un rol desconocido siempre es False. Una capacidad que no
    está en el catálogo es un error de configuración: en modo estricto se
    lanza UnknownCapabilityError, si no se reporta y se deniega.
    """
    if capability not in PERMISSION_CAPABILITIES:
        if _strict_mode():
            raise UnknownCapabilityError(capability)
        logger.error(f"Capacidad desconocida evaluada: '{capability}' (rol={role})")
        sentry_sdk.capture_message(f"Unknown RBAC capability: {capability}", level='error')
        return False

    role = normalize_role(role)
    if role is None:
        return False

    granted = (ROLE_PERMISSIONS if matrix is None else matrix).get(role, frozenset())
    return capability in granted


def role_of(user):
    """Rol efectivo de un usuario de Django, o None si es anónimo o no tiene rol."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return normalize_role(getattr(user, 'role', None))


class PermissionChecker:

    @staticmethod
    def user_has_permission(user, capability, matrix=None):
        """Verifica si el usuario tiene una capacidad concreta"""
        return can_access(role_of(user), capability, matrix)

    @staticmethod
    def user_has_any(user, capabilities, matrix=None):
        role = role_of(user)
        return any(can_access(role, capability, matrix) for capability in capabilities)

    @staticmethod
    def get_user_capabilities(user, matrix=None):
        """Lista ordenada de las capacidades del usuario"""
        role = role_of(user)
        if role is None:
            return []
        granted = (ROLE_PERMISSIONS if matrix is None else matrix).get(role, frozenset())
        return sorted(granted)
