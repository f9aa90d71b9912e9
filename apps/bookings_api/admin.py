from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'customer', 'therapist', 'service', 'booking_time', 'status', 'payment_status', 'price')
    list_filter = ('status', 'payment_status', 'therapist')
    search_fields = ('customer__first_name', 'customer__last_name', 'customer__email', 'address')
    # Los estados cambian desde la API, donde se validan las transiciones
    readonly_fields = ('status', 'payment_status', 'created_at', 'updated_at')
