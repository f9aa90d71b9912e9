"""
Catálogo de recursos navegables de la consola.

RESOURCE_TABLE describe cada recurso una sola vez: la ruta de listado, el
requisito para verlo y, por acción (show/edit/create/delete), la ruta y el
requisito de esa acción. build_resource_catalog() recorre la tabla en orden
para un rol y devuelve sólo lo que ese rol puede ver y hacer. La misma tabla
la usan los permisos de DRF (ver permissions.CatalogPermission), de modo que
menú y API no pueden divergir.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, Tuple

from django.core.exceptions import ImproperlyConfigured

from . import permission_config as caps
from .models import Role
from .permission_checker import can_access, normalize_role


@dataclass(frozen=True)
class Requirement:
    """Cumple si el rol tiene alguna de las capacidades y, si se indica, es exactamente `role`."""
    capabilities: Tuple[str, ...]
    role: Optional[str] = None

    def is_met(self, role, matrix=None):
        if self.role is not None and normalize_role(role) != self.role:
            return False
        return any(can_access(role, capability, matrix) for capability in self.capabilities)


def requires(*capabilities):
    return Requirement(capabilities=tuple(capabilities))


def requires_role(capability, role):
    return Requirement(capabilities=(capability,), role=role)


@dataclass(frozen=True)
class ActionDefinition:
    requirement: Requirement
    route: Optional[str] = None


@dataclass(frozen=True)
class ResourceDefinition:
    name: str
    list_route: str
    visibility: Requirement
    label: str
    icon: str
    actions: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    list: str
    label: str
    icon: str
    show: Optional[str] = None
    edit: Optional[str] = None
    create: Optional[str] = None
    can_delete: bool = False

    def to_dict(self):
        data = {'name': self.name, 'list': self.list}
        for action in ('show', 'edit', 'create'):
            route = getattr(self, action)
            if route is not None:
                data[action] = route
        data['meta'] = {
            'label': self.label,
            'icon': self.icon,
            'canDelete': self.can_delete,
        }
        return data


_BOOKINGS_VIEW = requires(caps.VIEW_ALL_BOOKINGS, caps.VIEW_OWN_BOOKINGS)
_MY_PROFILE = requires_role(caps.EDIT_OWN_PROFILE, Role.THERAPIST)

RESOURCE_TABLE = (
    ResourceDefinition(
        name='dashboard',
        list_route='/',
        visibility=requires(caps.VIEW_DASHBOARD),
        label='Dashboard',
        icon='🏠',
    ),
    ResourceDefinition(
        name='bookings',
        list_route='/bookings',
        visibility=_BOOKINGS_VIEW,
        label='Bookings',
        icon='📋',
        actions={
            'show': ActionDefinition(_BOOKINGS_VIEW, '/bookings/show/:id'),
            'edit': ActionDefinition(requires(caps.EDIT_ALL_BOOKINGS, caps.EDIT_OWN_BOOKINGS),
                                     '/bookings/edit/:id'),
            'create': ActionDefinition(requires(caps.CREATE_BOOKINGS), '/bookings/create'),
            'delete': ActionDefinition(requires(caps.DELETE_BOOKINGS)),
            # Sin ruta propia: sólo la usan los endpoints de pago
            'payment': ActionDefinition(requires(caps.MANAGE_PAYMENTS)),
        },
    ),
    ResourceDefinition(
        name='therapist_profiles',
        list_route='/therapists',
        visibility=requires(caps.VIEW_THERAPISTS),
        label='Therapists',
        icon='👨‍⚕️',
        actions={
            'show': ActionDefinition(requires(caps.VIEW_THERAPISTS), '/therapists/show/:id'),
            'edit': ActionDefinition(requires(caps.EDIT_THERAPISTS), '/therapists/edit/:id'),
            'create': ActionDefinition(requires(caps.CREATE_THERAPISTS), '/therapists/create'),
            'delete': ActionDefinition(requires(caps.DELETE_THERAPISTS)),
        },
    ),
    ResourceDefinition(
        name='my-profile',
        list_route='/my-profile',
        visibility=_MY_PROFILE,
        label='My Profile',
        icon='👤',
        actions={
            'edit': ActionDefinition(_MY_PROFILE, '/my-profile/edit'),
        },
    ),
    ResourceDefinition(
        name='customers',
        list_route='/customers',
        visibility=requires(caps.VIEW_CUSTOMERS),
        label='Customers',
        icon='👥',
        actions={
            'show': ActionDefinition(requires(caps.VIEW_CUSTOMERS), '/customers/show/:id'),
            'edit': ActionDefinition(requires(caps.EDIT_CUSTOMERS), '/customers/edit/:id'),
            'delete': ActionDefinition(requires(caps.DELETE_CUSTOMERS)),
        },
    ),
    ResourceDefinition(
        name='services',
        list_route='/services',
        visibility=requires(caps.VIEW_SERVICES),
        label='Services',
        icon='💆‍♀️',
        actions={
            'show': ActionDefinition(requires(caps.VIEW_SERVICES), '/services/show/:id'),
            'edit': ActionDefinition(requires(caps.EDIT_SERVICES), '/services/edit/:id'),
            'create': ActionDefinition(requires(caps.CREATE_SERVICES), '/services/create'),
            'delete': ActionDefinition(requires(caps.DELETE_SERVICES)),
        },
    ),
    ResourceDefinition(
        name='reports',
        list_route='/reports',
        visibility=requires(caps.VIEW_REPORTS),
        label='Reports',
        icon='📊',
    ),
    ResourceDefinition(
        name='system-settings',
        list_route='/settings',
        visibility=requires(caps.ACCESS_SYSTEM_SETTINGS),
        label='System Settings',
        icon='⚙️',
        actions={
            'edit': ActionDefinition(requires(caps.ACCESS_SYSTEM_SETTINGS), '/settings/edit'),
        },
    ),
    ResourceDefinition(
        name='user-management',
        list_route='/users',
        visibility=requires(caps.MANAGE_USERS),
        label='User Management',
        icon='🔐',
        actions={
            'show': ActionDefinition(requires(caps.MANAGE_USERS), '/users/show/:id'),
            'edit': ActionDefinition(requires(caps.MANAGE_USERS), '/users/edit/:id'),
            'create': ActionDefinition(requires(caps.MANAGE_USERS), '/users/create'),
            'delete': ActionDefinition(requires(caps.MANAGE_USERS)),
        },
    ),
    ResourceDefinition(
        name='activity-logs',
        list_route='/activity-logs',
        visibility=requires(caps.VIEW_ACTIVITY_LOGS),
        label='Activity Logs',
        icon='📜',
        actions={
            'show': ActionDefinition(requires(caps.VIEW_ACTIVITY_LOGS), '/activity-logs/show/:id'),
        },
    ),
)

RESOURCES_BY_NAME = MappingProxyType({resource.name: resource for resource in RESOURCE_TABLE})


def requirement_for(resource_name, action):
    """
    Requisito de una acción ('list', 'show', 'edit', 'create', 'delete', 'payment').

    Devuelve None si el recurso no ofrece esa acción, lo que equivale a denegar.
    """
    try:
        resource = RESOURCES_BY_NAME[resource_name]
    except KeyError:
        raise ImproperlyConfigured(f"Recurso desconocido: '{resource_name}'")

    if action == 'list':
        return resource.visibility
    definition = resource.actions.get(action)
    return definition.requirement if definition else None


def build_resource_catalog(role, matrix=None):
    """Lista de ResourceDescriptor visibles para `role`, en el orden de RESOURCE_TABLE."""
    catalog = []
    for resource in RESOURCE_TABLE:
        if not resource.visibility.is_met(role, matrix):
            continue

        granted = {
            action: definition
            for action, definition in resource.actions.items()
            if definition.requirement.is_met(role, matrix)
        }
        catalog.append(ResourceDescriptor(
            name=resource.name,
            list=resource.list_route,
            label=resource.label,
            icon=resource.icon,
            show=granted['show'].route if 'show' in granted else None,
            edit=granted['edit'].route if 'edit' in granted else None,
            create=granted['create'].route if 'create' in granted else None,
            can_delete='delete' in granted,
        ))
    return catalog
