"""Core Django settings for the file viewer server."""

from typing import Final

from decouple import Csv

from server.settings.components import config

SECRET_KEY = config('DJANGO_SECRET_KEY', default='file-viewer-insecure-key')

DEBUG = config('DJANGO_DEBUG', cast=bool, default=False)

ALLOWED_HOSTS = config(
    'DJANGO_ALLOWED_HOSTS',
    cast=Csv(),
    default='localhost,127.0.0.1,testserver',
)

INSTALLED_APPS: Final = (
    'server.apps.viewer',
)

MIDDLEWARE: Final = (
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
)

ROOT_URLCONF = 'server.urls'

WSGI_APPLICATION = 'server.wsgi.application'

# The viewer keeps no state in a database
DATABASES: Final[dict[str, dict[str, str]]] = {}

USE_TZ = True
TIME_ZONE = config('DJANGO_TIME_ZONE', default='UTC')
