"""
Matriz de permisos de la consola.

Cada rol declara su conjunto de capacidades de forma explícita. No hay
herencia entre roles ni comodines tipo 'ALL': una capacidad que no aparece en
la lista de un rol está denegada para ese rol.
"""
from types import MappingProxyType

from .models import Role

# Dashboard
VIEW_DASHBOARD = 'view_dashboard'

# Bookings
VIEW_ALL_BOOKINGS = 'view_all_bookings'
VIEW_OWN_BOOKINGS = 'view_own_bookings'
CREATE_BOOKINGS = 'create_bookings'
EDIT_ALL_BOOKINGS = 'edit_all_bookings'
EDIT_OWN_BOOKINGS = 'edit_own_bookings'
DELETE_BOOKINGS = 'delete_bookings'
OVERRIDE_TERMINAL_STATUS = 'override_terminal_status'
MANAGE_PAYMENTS = 'manage_payments'

# Therapists
VIEW_THERAPISTS = 'view_therapists'
CREATE_THERAPISTS = 'create_therapists'
EDIT_THERAPISTS = 'edit_therapists'
DELETE_THERAPISTS = 'delete_therapists'
EDIT_OWN_PROFILE = 'edit_own_profile'

# Customers
VIEW_CUSTOMERS = 'view_customers'
EDIT_CUSTOMERS = 'edit_customers'
DELETE_CUSTOMERS = 'delete_customers'

# Services
VIEW_SERVICES = 'view_services'
CREATE_SERVICES = 'create_services'
EDIT_SERVICES = 'edit_services'
DELETE_SERVICES = 'delete_services'

# Administración
VIEW_REPORTS = 'view_reports'
ACCESS_SYSTEM_SETTINGS = 'access_system_settings'
MANAGE_USERS = 'manage_users'
VIEW_ACTIVITY_LOGS = 'view_activity_logs'


PERMISSION_CAPABILITIES = MappingProxyType({
    VIEW_DASHBOARD: {
        'description': 'Ver el panel principal',
        'endpoints': ['/api/reports/dashboard/'],
        'methods': ['GET'],
    },

    # Bookings
    VIEW_ALL_BOOKINGS: {
        'description': 'Ver todas las reservas',
        'endpoints': ['/api/bookings/bookings/', '/api/bookings/bookings/{id}/'],
        'methods': ['GET'],
    },
    VIEW_OWN_BOOKINGS: {
        'description': 'Ver las reservas asignadas al terapeuta',
        'endpoints': ['/api/bookings/bookings/', '/api/bookings/bookings/{id}/'],
        'methods': ['GET'],
    },
    CREATE_BOOKINGS: {
        'description': 'Crear reservas',
        'endpoints': ['/api/bookings/bookings/'],
        'methods': ['POST'],
    },
    EDIT_ALL_BOOKINGS: {
        'description': 'Modificar y cambiar el estado de cualquier reserva',
        'endpoints': ['/api/bookings/bookings/{id}/', '/api/bookings/bookings/{id}/transition/',
                      '/api/bookings/bookings/bulk-transition/'],
        'methods': ['PUT', 'PATCH', 'POST'],
    },
    EDIT_OWN_BOOKINGS: {
        'description': 'Modificar y cambiar el estado de las reservas propias',
        'endpoints': ['/api/bookings/bookings/{id}/', '/api/bookings/bookings/{id}/transition/'],
        'methods': ['PUT', 'PATCH', 'POST'],
    },
    DELETE_BOOKINGS: {
        'description': 'Eliminar reservas',
        'endpoints': ['/api/bookings/bookings/{id}/', '/api/bookings/bookings/bulk-delete/'],
        'methods': ['DELETE', 'POST'],
    },
    OVERRIDE_TERMINAL_STATUS: {
        'description': 'Reabrir reservas en estado final (completada, cancelada, rechazada)',
        'endpoints': ['/api/bookings/bookings/{id}/transition/'],
        'methods': ['POST'],
    },
    MANAGE_PAYMENTS: {
        'description': 'Cambiar el estado de pago de las reservas',
        'endpoints': ['/api/bookings/bookings/{id}/payment/', '/api/bookings/bookings/bulk-payment/'],
        'methods': ['POST'],
    },

    # Therapists
    VIEW_THERAPISTS: {
        'description': 'Ver terapeutas',
        'endpoints': ['/api/therapists/profiles/', '/api/therapists/profiles/{id}/'],
        'methods': ['GET'],
    },
    CREATE_THERAPISTS: {
        'description': 'Crear terapeutas',
        'endpoints': ['/api/therapists/profiles/'],
        'methods': ['POST'],
    },
    EDIT_THERAPISTS: {
        'description': 'Modificar terapeutas',
        'endpoints': ['/api/therapists/profiles/{id}/'],
        'methods': ['PUT', 'PATCH'],
    },
    DELETE_THERAPISTS: {
        'description': 'Eliminar terapeutas',
        'endpoints': ['/api/therapists/profiles/{id}/'],
        'methods': ['DELETE'],
    },
    EDIT_OWN_PROFILE: {
        'description': 'Editar el perfil propio',
        'endpoints': ['/api/therapists/my-profile/'],
        'methods': ['GET', 'PATCH', 'POST'],
    },

    # Customers
    VIEW_CUSTOMERS: {
        'description': 'Ver clientes',
        'endpoints': ['/api/customers/customers/', '/api/customers/customers/{id}/'],
        'methods': ['GET'],
    },
    EDIT_CUSTOMERS: {
        'description': 'Modificar clientes',
        'endpoints': ['/api/customers/customers/{id}/'],
        'methods': ['PUT', 'PATCH'],
    },
    DELETE_CUSTOMERS: {
        'description': 'Eliminar clientes',
        'endpoints': ['/api/customers/customers/{id}/'],
        'methods': ['DELETE'],
    },

    # Services
    VIEW_SERVICES: {
        'description': 'Ver servicios',
        'endpoints': ['/api/services/services/', '/api/services/services/{id}/'],
        'methods': ['GET'],
    },
    CREATE_SERVICES: {
        'description': 'Crear servicios',
        'endpoints': ['/api/services/services/'],
        'methods': ['POST'],
    },
    EDIT_SERVICES: {
        'description': 'Modificar servicios',
        'endpoints': ['/api/services/services/{id}/'],
        'methods': ['PUT', 'PATCH'],
    },
    DELETE_SERVICES: {
        'description': 'Eliminar servicios',
        'endpoints': ['/api/services/services/{id}/'],
        'methods': ['DELETE'],
    },

    # Administración
    VIEW_REPORTS: {
        'description': 'Ver reportes',
        'endpoints': ['/api/reports/bookings/'],
        'methods': ['GET'],
    },
    ACCESS_SYSTEM_SETTINGS: {
        'description': 'Ver y modificar la configuración del sistema',
        'endpoints': ['/api/settings/system/', '/api/settings/system/reset/'],
        'methods': ['GET', 'PUT', 'PATCH', 'POST'],
    },
    MANAGE_USERS: {
        'description': 'Gestionar usuarios y asignar roles',
        'endpoints': ['/api/auth/users/', '/api/auth/users/{id}/'],
        'methods': ['GET', 'POST', 'PUT', 'PATCH', 'DELETE'],
    },
    VIEW_ACTIVITY_LOGS: {
        'description': 'Ver el registro de actividad',
        'endpoints': ['/api/audit/logs/'],
        'methods': ['GET'],
    },
})


ROLE_PERMISSIONS = MappingProxyType({
    Role.SUPER_ADMIN: frozenset({
        VIEW_DASHBOARD,
        VIEW_ALL_BOOKINGS, CREATE_BOOKINGS, EDIT_ALL_BOOKINGS, DELETE_BOOKINGS,
        OVERRIDE_TERMINAL_STATUS, MANAGE_PAYMENTS,
        VIEW_THERAPISTS, CREATE_THERAPISTS, EDIT_THERAPISTS, DELETE_THERAPISTS,
        EDIT_OWN_PROFILE,
        VIEW_CUSTOMERS, EDIT_CUSTOMERS, DELETE_CUSTOMERS,
        VIEW_SERVICES, CREATE_SERVICES, EDIT_SERVICES, DELETE_SERVICES,
        VIEW_REPORTS, ACCESS_SYSTEM_SETTINGS, MANAGE_USERS, VIEW_ACTIVITY_LOGS,
    }),

    Role.ADMIN: frozenset({
        VIEW_DASHBOARD,
        VIEW_ALL_BOOKINGS, CREATE_BOOKINGS, EDIT_ALL_BOOKINGS, DELETE_BOOKINGS,
        MANAGE_PAYMENTS,
        VIEW_THERAPISTS, CREATE_THERAPISTS, EDIT_THERAPISTS, DELETE_THERAPISTS,
        EDIT_OWN_PROFILE,
        VIEW_CUSTOMERS, EDIT_CUSTOMERS, DELETE_CUSTOMERS,
        VIEW_SERVICES, CREATE_SERVICES, EDIT_SERVICES, DELETE_SERVICES,
        VIEW_REPORTS,
    }),

    Role.THERAPIST: frozenset({
        VIEW_DASHBOARD,
        VIEW_OWN_BOOKINGS, EDIT_OWN_BOOKINGS,
        VIEW_SERVICES,
        EDIT_OWN_PROFILE,
    }),

    Role.CUSTOMER: frozenset({
        VIEW_DASHBOARD,
        EDIT_OWN_PROFILE,
    }),
})
