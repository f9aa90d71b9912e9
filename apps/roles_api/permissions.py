import logging

from rest_framework.permissions import BasePermission

from .guards import GuardOutcome, Identity, RouteGuard
from .resources import requirement_for, requires, Requirement

logger = logging.getLogger(__name__)

DEFAULT_ACTION_MAP = {
    'list': 'list',
    'retrieve': 'show',
    'create': 'create',
    'update': 'edit',
    'partial_update': 'edit',
    'destroy': 'delete',
}

METHOD_ACTION_MAP = {
    'GET': 'list',
    'HEAD': 'list',
    'OPTIONS': 'list',
    'POST': 'create',
    'PUT': 'edit',
    'PATCH': 'edit',
    'DELETE': 'delete',
}


def _guard_request(request, requirement):
    identity = Identity.from_user(request.user)
    outcome = RouteGuard(requirement).evaluate(identity)
    if outcome is GuardOutcome.DENIED and identity.is_resolved:
        logger.info(f"Permiso denegado a {request.user.pk} (rol={identity.role}) en "
                    f"{request.method} {request.path}")
    return outcome is GuardOutcome.GRANTED


class CatalogPermission(BasePermission):
    """
    Aplica a una vista los mismos requisitos que el catálogo de recursos.

    La vista declara `catalog_resource` y, para acciones propias, un
    `catalog_action_map` que traduce la acción de DRF a list/show/edit/create/delete.
    Una acción sin traducción se deniega.
    """
    message = 'No tienes permiso para realizar esta acción.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        action = self._catalog_action(request, view)
        if action is None:
            return False

        requirement = requirement_for(view.catalog_resource, action)
        if requirement is None:
            return False
        return _guard_request(request, requirement)

    def _catalog_action(self, request, view):
        drf_action = getattr(view, 'action', None)
        if drf_action is None:
            return METHOD_ACTION_MAP.get(request.method)
        action_map = {**DEFAULT_ACTION_MAP, **getattr(view, 'catalog_action_map', {})}
        return action_map.get(drf_action)


class CapabilityPermission(BasePermission):
    requirement = Requirement(capabilities=())
    message = 'No tienes permiso para realizar esta acción.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return _guard_request(request, self.requirement)


def capability_permission_for(*capabilities, role=None):
    """
    Genera dinámicamente un permiso que exige alguna de las capacidades indicadas
    (y, opcionalmente, un rol concreto).
    """
    requirement = requires(*capabilities)
    if role is not None:
        requirement = Requirement(capabilities=requirement.capabilities, role=role)
    return type(
        f'CapabilityPermissionFor_{"_".join(capabilities)}',
        (CapabilityPermission,),
        {'requirement': requirement},
    )
