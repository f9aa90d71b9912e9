from django.apps import AppConfig


class ReportsApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.reports_api'
    verbose_name = 'Reportes'
