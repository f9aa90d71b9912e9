from django.contrib import admin
from .models import TherapistAvailability, TherapistProfile, TherapistService


class TherapistAvailabilityInline(admin.TabularInline):
    model = TherapistAvailability
    extra = 0


class TherapistServiceInline(admin.TabularInline):
    model = TherapistService
    extra = 0


@admin.register(TherapistProfile)
class TherapistProfileAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'email', 'specialty', 'is_active')
    list_filter = ('is_active', 'specialty')
    search_fields = ('first_name', 'last_name', 'email')
    inlines = [TherapistAvailabilityInline, TherapistServiceInline]
