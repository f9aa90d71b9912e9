import pytest
from django.urls import reverse
from rest_framework import status

from apps.audit_api.models import AuditLog
from apps.settings_api.models import SystemSettings
from apps.settings_api.utils import get_system_config

pytestmark = pytest.mark.django_db


def test_get_settings_is_a_singleton():
    first = SystemSettings.get_settings()
    second = SystemSettings.get_settings()
    assert first.pk == second.pk == 1
    assert SystemSettings.objects.count() == 1
    assert first.business_name == 'Rejuvenators'


def test_super_admin_reads_settings(super_admin_user):
    _user, client = super_admin_user
    response = client.get(reverse('system-settings'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['default_currency'] == 'AUD'


@pytest.mark.parametrize('fixture', ['admin_user', 'customer_user'])
def test_settings_forbidden_without_capability(request, fixture):
    _user, client = request.getfixturevalue(fixture)
    assert client.get(reverse('system-settings')).status_code == status.HTTP_403_FORBIDDEN


def test_update_settings_clears_cache_and_audits(super_admin_user):
    user, client = super_admin_user
    assert get_system_config().maintenance_mode is False

    response = client.patch(reverse('system-settings'), {'maintenance_mode': True}, format='json')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    assert get_system_config().maintenance_mode is True
    assert SystemSettings.objects.get().updated_by == user

    log = AuditLog.objects.get(action='SETTING_UPDATE')
    assert log.source == 'SETTINGS'
    assert log.extra_data == {'fields': ['maintenance_mode']}


def test_invalid_timezone(super_admin_user):
    _user, client = super_admin_user
    response = client.patch(reverse('system-settings'), {'timezone': 'Mars/Olympus'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_reset_settings(super_admin_user):
    _user, client = super_admin_user
    settings = SystemSettings.get_settings()
    settings.business_name = 'Other'
    settings.save()

    response = client.post(reverse('system-settings-reset'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['business_name'] == 'Rejuvenators'
    assert SystemSettings.objects.get().business_name == 'Rejuvenators'
