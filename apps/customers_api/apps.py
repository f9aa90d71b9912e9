from django.apps import AppConfig


class CustomersApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.customers_api'
    verbose_name = 'Clientes'
