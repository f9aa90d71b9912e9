import pytest
from django.conf import settings
from rest_framework.test import APIClient

from apps.auth_api.factories import AdminFactory, SuperAdminFactory, TherapistUserFactory, UserFactory
from apps.bookings_api.factories import BookingFactory
from apps.customers_api.factories import CustomerFactory
from apps.services_api.factories import ServiceFactory
from apps.therapists_api.factories import TherapistProfileFactory


@pytest.fixture(autouse=True)
def set_urlconf():
    """Se asegura de que todas las pruebas usen el urls.py de backend."""
    settings.ROOT_URLCONF = 'backend.urls'


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Retorna una instancia de APIClient para pruebas."""
    return APIClient()


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def super_admin_user(db):
    user = SuperAdminFactory()
    return user, _client_for(user)


@pytest.fixture
def admin_user(db):
    user = AdminFactory()
    return user, _client_for(user)


@pytest.fixture
def therapist_user(db):
    """Usuario terapeuta con su ficha de terapeuta"""
    user = TherapistUserFactory()
    profile = TherapistProfileFactory(user=user)
    return user, _client_for(user), profile


@pytest.fixture
def customer_user(db):
    user = UserFactory()
    return user, _client_for(user)


@pytest.fixture
def no_role_user(db):
    user = UserFactory(role=None)
    return user, _client_for(user)


@pytest.fixture
def customer(db):
    return CustomerFactory()


@pytest.fixture
def service(db):
    return ServiceFactory()


@pytest.fixture
def booking_factory(db):
    return BookingFactory


@pytest.fixture
def therapist_factory(db):
    return TherapistProfileFactory
