from django.urls import path

from .views import SystemSettingsResetView, SystemSettingsRetrieveUpdateView

urlpatterns = [
    path('system/', SystemSettingsRetrieveUpdateView.as_view(), name='system-settings'),
    path('system/reset/', SystemSettingsResetView.as_view(), name='system-settings-reset'),
]
