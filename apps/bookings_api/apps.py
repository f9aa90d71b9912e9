from django.apps import AppConfig


class BookingsApiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.bookings_api'
    verbose_name = 'Reservas'
