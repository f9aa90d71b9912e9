from django.apps import AppConfig


class ServicesApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.services_api'
    verbose_name = 'Servicios'
