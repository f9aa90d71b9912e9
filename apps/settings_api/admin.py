from django.contrib import admin
from .models import SystemSettings


@admin.register(SystemSettings)
class SystemSettingsAdmin(admin.ModelAdmin):
    list_display = ['business_name', 'default_currency', 'timezone', 'maintenance_mode', 'updated_at']
    fieldsets = (
        ('General', {
            'fields': ('business_name', 'support_email', 'phone_number', 'default_currency', 'timezone')
        }),
        ('Bookings', {
            'fields': ('booking_response_timeout_minutes', 'default_therapist_fee_percentage',
                       'min_booking_notice_hours')
        }),
        ('System', {
            'fields': ('maintenance_mode', 'email_notifications')
        }),
    )
    readonly_fields = ['updated_at']

    def has_add_permission(self, request):
        return not SystemSettings.objects.exists()
