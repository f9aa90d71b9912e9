import io

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from PIL import Image
from rest_framework import status

from apps.auth_api.factories import TherapistUserFactory
from apps.services_api.factories import ServiceFactory
from apps.therapists_api.factories import TherapistProfileFactory
from apps.therapists_api.models import TherapistAvailability, TherapistProfile, TherapistService
from apps.therapists_api.storage import optimized_image_url


def make_image(fmt='PNG', name='photo.png'):
    buffer = io.BytesIO()
    Image.new('RGB', (32, 32), color=(200, 120, 80)).save(buffer, format=fmt)
    return SimpleUploadedFile(name, buffer.getvalue(), content_type=f'image/{fmt.lower()}')


@pytest.fixture
def media_storage(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    settings.MEDIA_URL = 'https://cdn.rejuvenators.com/media/'
    settings.THERAPIST_PHOTO_BUCKET = 'therapist-photos'
    return tmp_path


# -- optimized_image_url --------------------------------------------------------

def test_optimized_image_url_adds_transform_params():
    url = optimized_image_url('https://cdn.example.com/a/b.jpg', width=400, height=300)
    assert url == 'https://cdn.example.com/a/b.jpg?width=400&height=300&quality=80'


def test_optimized_image_url_keeps_existing_query():
    url = optimized_image_url('https://cdn.example.com/b.jpg?v=2', width=128, quality=60)
    assert url == 'https://cdn.example.com/b.jpg?v=2&width=128&quality=60'


@pytest.mark.parametrize('value', ['not a url', '/media/photo.jpg'])
def test_optimized_image_url_returns_invalid_urls_unchanged(value):
    assert optimized_image_url(value, width=100) == value


def test_optimized_image_url_empty():
    assert optimized_image_url('') == ''
    assert optimized_image_url(None) == ''


# -- perfiles (administración) --------------------------------------------------

@pytest.mark.django_db
def test_admin_creates_therapist_profile(admin_user):
    _user, client = admin_user
    linked = TherapistUserFactory()
    response = client.post(reverse('therapist-profile-list'), {
        'user': linked.pk,
        'first_name': 'Lena',
        'last_name': 'Park',
        'specialty': 'Sports',
        'years_experience': 6,
    }, format='json')
    assert response.status_code == status.HTTP_201_CREATED, f"Error: {response.data}"
    assert TherapistProfile.objects.get().user == linked
    assert response.data['photo_urls'] is None


@pytest.mark.django_db
def test_therapist_cannot_manage_profiles(therapist_user):
    _user, client, _profile = therapist_user
    assert client.get(reverse('therapist-profile-list')).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_therapist_lookups_only_active(admin_user):
    _user, client = admin_user
    TherapistProfileFactory(first_name='Bea')
    TherapistProfileFactory(first_name='Al')
    TherapistProfileFactory(first_name='Cy', is_active=False)
    response = client.get(reverse('therapist-profile-lookups'))
    assert [item['first_name'] for item in response.data] == ['Al', 'Bea']


@pytest.mark.django_db
def test_admin_uploads_photo(admin_user, media_storage):
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    response = client.post(reverse('therapist-profile-photo', args=[therapist.pk]),
                           {'photo': make_image()}, format='multipart')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"

    therapist.refresh_from_db()
    assert therapist.profile_pic.startswith(f'https://cdn.rejuvenators.com/media/therapist-photos/{therapist.pk}/')
    assert therapist.profile_pic.endswith('.png')
    assert response.data['photo_urls']['thumbnail'].endswith('width=128&height=128&quality=80')
    assert any(media_storage.rglob('*.png'))


@pytest.mark.django_db
def test_photo_url_is_absolute_with_relative_media_url(admin_user, media_storage, settings):
    settings.MEDIA_URL = '/media/'
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    response = client.post(reverse('therapist-profile-photo', args=[therapist.pk]),
                           {'photo': make_image()}, format='multipart')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"

    therapist.refresh_from_db()
    assert therapist.profile_pic.startswith(f'http://testserver/media/therapist-photos/{therapist.pk}/')
    assert response.data['photo_urls']['thumbnail'].startswith('http://testserver/media/')
    assert response.data['photo_urls']['thumbnail'].endswith('width=128&height=128&quality=80')


@pytest.mark.django_db
def test_photo_upload_rejects_non_images(admin_user, media_storage):
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    bogus = SimpleUploadedFile('photo.png', b'definitely not an image', content_type='image/png')
    response = client.post(reverse('therapist-profile-photo', args=[therapist.pk]),
                           {'photo': bogus}, format='multipart')
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    therapist.refresh_from_db()
    assert therapist.profile_pic == ''


@pytest.mark.django_db
def test_photo_upload_rejects_large_files(admin_user, media_storage, settings):
    settings.THERAPIST_PHOTO_MAX_SIZE = 10
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    response = client.post(reverse('therapist-profile-photo', args=[therapist.pk]),
                           {'photo': make_image()}, format='multipart')
    assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
def test_photo_upload_rejects_unsupported_format(admin_user, media_storage):
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    response = client.post(reverse('therapist-profile-photo', args=[therapist.pk]),
                           {'photo': make_image('GIF', 'photo.gif')}, format='multipart')
    assert response.status_code == status.HTTP_400_BAD_REQUEST


# -- disponibilidad y servicios ---------------------------------------------------

@pytest.mark.django_db
def test_availability_end_after_start(admin_user):
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    url = reverse('therapist-availability-list')

    response = client.post(url, {'therapist': therapist.pk, 'day_of_week': 1,
                                 'start_time': '17:00', 'end_time': '09:00'}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post(url, {'therapist': therapist.pk, 'day_of_week': 1,
                                 'start_time': '09:00', 'end_time': '17:00'}, format='json')
    assert response.status_code == status.HTTP_201_CREATED, f"Error: {response.data}"
    assert response.data['day_name'] == 'Tuesday'
    assert TherapistAvailability.objects.count() == 1


@pytest.mark.django_db
def test_assign_service_to_therapist(admin_user):
    _user, client = admin_user
    therapist = TherapistProfileFactory()
    service = ServiceFactory(name='Shiatsu')
    url = reverse('therapist-service-list')

    response = client.post(url, {'therapist': therapist.pk, 'service': service.pk}, format='json')
    assert response.status_code == status.HTTP_201_CREATED, f"Error: {response.data}"
    assert response.data['service_name'] == 'Shiatsu'

    response = client.post(url, {'therapist': therapist.pk, 'service': service.pk}, format='json')
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert TherapistService.objects.count() == 1


# -- mi perfil -----------------------------------------------------------------

@pytest.mark.django_db
def test_therapist_reads_own_profile(therapist_user):
    user, client, profile = therapist_user
    response = client.get(reverse('my-profile'))
    assert response.status_code == status.HTTP_200_OK
    assert response.data['id'] == profile.pk
    assert response.data['user'] == user.pk


@pytest.mark.django_db
def test_therapist_updates_own_profile_but_not_email(therapist_user):
    _user, client, profile = therapist_user
    original_email = profile.email
    response = client.patch(reverse('my-profile'), {'bio': 'Remedial and sports massage', 'email': 'x@y.com'},
                            format='json')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    profile.refresh_from_db()
    assert profile.bio == 'Remedial and sports massage'
    assert profile.email == original_email


@pytest.mark.django_db
def test_my_profile_requires_therapist_role(admin_user, super_admin_user, customer_user):
    # Tienen edit_own_profile pero no el rol therapist
    for _user, client in (admin_user, super_admin_user, customer_user):
        assert client.get(reverse('my-profile')).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
def test_my_profile_without_linked_profile(api_client):
    user = TherapistUserFactory()
    api_client.force_authenticate(user=user)
    assert api_client.get(reverse('my-profile')).status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
def test_therapist_uploads_own_photo(therapist_user, media_storage):
    _user, client, profile = therapist_user
    response = client.post(reverse('my-profile-photo'), {'photo': make_image('JPEG', 'me.jpg')},
                           format='multipart')
    assert response.status_code == status.HTTP_200_OK, f"Error: {response.data}"
    profile.refresh_from_db()
    assert profile.profile_pic.endswith('.jpg')
