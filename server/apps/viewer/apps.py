"""Django app configuration for viewer app."""

from django.apps import AppConfig


class ViewerConfig(AppConfig):
    """Configuration for viewer app."""

    name = 'server.apps.viewer'
    verbose_name = 'File viewer'
