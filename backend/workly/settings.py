"""
Django settings for the workly project.

Values come from the environment so the same module serves development,
tests and deployment:

    DJANGO_SECRET_KEY       secret key (a development default is used if unset)
    DJANGO_DEBUG            "1" to enable debug mode
    DJANGO_ALLOWED_HOSTS    comma-separated host names
    WORKLY_DEV_MODE         "1" for console log output instead of JSON
    LOG_LEVEL               root log level (default INFO)
    WORKLY_THROTTLE_RATE    request rate for the hierarchy endpoints (default 60/min)
"""

import os
from pathlib import Path

from .logging import build_logging_config, configure_structlog

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'workly-dev-secret-key-change-me')

DEBUG = os.environ.get('DJANGO_DEBUG') == '1'

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')
    if host.strip()
]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.staticfiles',
    'rest_framework',
    'drf_spectacular',
    'hierarchy',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'workly.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'workly.wsgi.application'

# The engine persists nothing; the database only backs Django's test runner.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

# Authentication belongs to the surrounding application.
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'DEFAULT_THROTTLE_RATES': {
        'anon': '100/min',
        'hierarchy': os.environ.get('WORKLY_THROTTLE_RATE', '60/min'),
        'today': '30/min',
    },
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'Workly Hierarchy API',
    'DESCRIPTION': (
        'Hierarchy paths, change validation, contribution scoring and the '
        'today view for Workly tasks, projects and goals.'
    ),
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}

# Logging
configure_structlog()
LOGGING = build_logging_config(
    dev_mode=os.environ.get('WORKLY_DEV_MODE') == '1',
    level=os.environ.get('LOG_LEVEL', 'INFO'),
)
