from django.urls import path

from .views import AccessViewSet, PermissionMatrixViewSet

urlpatterns = [
    path('capabilities/', AccessViewSet.as_view({'get': 'capabilities'}), name='role-capabilities'),
    path('resources/', AccessViewSet.as_view({'get': 'resources'}), name='role-resources'),
    path('matrix/', PermissionMatrixViewSet.as_view({'get': 'list'}), name='role-matrix'),
]
