"""URL configuration for viewer app."""

from django.urls import path

from server.apps.viewer.views import browse_view

app_name = 'viewer'

urlpatterns = [
    path('', browse_view, name='root'),
    path('<path:file_path>', browse_view, name='browse'),
]
