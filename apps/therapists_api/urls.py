from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    MyProfilePhotoView, MyProfileView, TherapistAvailabilityViewSet,
    TherapistProfileViewSet, TherapistServiceViewSet,
)

router = DefaultRouter()
router.register(r'profiles', TherapistProfileViewSet, basename='therapist-profile')
router.register(r'availability', TherapistAvailabilityViewSet, basename='therapist-availability')
router.register(r'services', TherapistServiceViewSet, basename='therapist-service')

urlpatterns = [
    path('my-profile/', MyProfileView.as_view(), name='my-profile'),
    path('my-profile/photo/', MyProfilePhotoView.as_view(), name='my-profile-photo'),
    path('', include(router.urls)),
]
