from django.apps import AppConfig


class TherapistsApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.therapists_api'
    verbose_name = 'Terapeutas'
