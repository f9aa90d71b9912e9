from django.apps import AppConfig


class RolesApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.roles_api'
    verbose_name = 'Roles y permisos'
