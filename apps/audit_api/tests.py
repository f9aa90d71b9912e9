import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIRequestFactory

from apps.audit_api.models import AuditLog
from apps.audit_api.utils import create_audit_log, get_client_ip
from apps.services_api.factories import ServiceFactory

pytestmark = pytest.mark.django_db


def test_create_audit_log_with_request(admin_user):
    user, _client = admin_user
    service = ServiceFactory()
    request = APIRequestFactory().get('/', HTTP_USER_AGENT='pytest', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')

    log = create_audit_log(user, 'UPDATE', 'Servicio modificado', content_object=service,
                           request=request, source='SERVICES', extra_data={'field': 'price'})

    assert log.user == user
    assert log.ip_address == '10.0.0.1'
    assert log.user_agent == 'pytest'
    assert log.content_object == service
    assert log.extra_data == {'field': 'price'}


def test_get_client_ip_falls_back_to_remote_addr():
    request = APIRequestFactory().get('/', REMOTE_ADDR='192.168.1.5')
    assert get_client_ip(request) == '192.168.1.5'


def test_activity_logs_are_super_admin_only(admin_user, super_admin_user):
    _admin, admin_client = admin_user
    root, root_client = super_admin_user
    create_audit_log(root, 'ADMIN_ACTION', 'Mantenimiento', source='SYSTEM')

    assert admin_client.get(reverse('audit-log-list')).status_code == status.HTTP_403_FORBIDDEN

    response = root_client.get(reverse('audit-log-list'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['count'] == 1
    assert response.data['results'][0]['description'] == 'Mantenimiento'


def test_activity_logs_filters(super_admin_user):
    root, client = super_admin_user
    create_audit_log(root, 'STATUS_CHANGE', 'Reserva 1 → confirmed', source='BOOKINGS')
    create_audit_log(root, 'ROLE_ASSIGN', 'Rol cambiado', source='ROLES')

    response = client.get(reverse('audit-log-list'), {'source': 'BOOKINGS'})
    assert [item['action'] for item in response.data['results']] == ['STATUS_CHANGE']

    response = client.get(reverse('audit-log-list'), {'search': 'Rol cambiado'})
    assert response.data['count'] == 1


def test_activity_logs_are_read_only(super_admin_user):
    _root, client = super_admin_user
    response = client.post(reverse('audit-log-list'), {'action': 'CREATE', 'description': 'x'}, format='json')
    assert response.status_code in (status.HTTP_403_FORBIDDEN, status.HTTP_405_METHOD_NOT_ALLOWED)
    assert not AuditLog.objects.exists()


def test_actions_and_sources(super_admin_user):
    _root, client = super_admin_user
    actions = client.get(reverse('audit-log-actions')).data
    assert {'value': 'STATUS_CHANGE', 'label': 'Cambio de estado'} in actions
    sources = client.get(reverse('audit-log-sources')).data
    assert {'value': 'BOOKINGS', 'label': 'Reservas'} in sources


def test_viewset_writes_are_logged_with_their_own_action(admin_user):
    user, client = admin_user
    response = client.post(reverse('service-list'), {'name': 'Hot Stone', 'price': '150.00', 'duration': 60},
                           format='json')
    assert response.status_code == status.HTTP_201_CREATED
    service_id = response.data['id']

    client.patch(reverse('service-detail', args=[service_id]), {'price': '160.00'}, format='json')
    client.delete(reverse('service-detail', args=[service_id]))

    actions = list(AuditLog.objects.filter(user=user, source='SERVICES')
                   .order_by('timestamp', 'id').values_list('action', flat=True))
    assert actions == ['CREATE', 'UPDATE', 'DELETE']
