from django.contrib import admin
from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'user', 'action', 'source', 'object_id')
    list_filter = ('action', 'source')
    search_fields = ('user__email', 'description', 'object_id')
    ordering = ('-timestamp',)
    # los logs no se modifican desde el admin
    readonly_fields = ('timestamp', 'user', 'action', 'description', 'content_type', 'object_id',
                       'ip_address', 'user_agent', 'extra_data', 'source')
