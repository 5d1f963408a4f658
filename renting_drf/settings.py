"""
Django settings for renting_drf project.

Every deployment-specific value is read from the environment; the defaults
are meant for local development and the test suite.

For more information on this file, see
https://docs.djangoproject.com/en/5.1/topics/settings/
"""

import os
from decimal import Decimal
from pathlib import Path

from celery.schedules import crontab


def env_bool(name, default=False):
    return os.getenv(name, str(default)).lower() in ('1', 'true', 'yes', 'on')


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-renting-development-key')

DEBUG = env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = [host for host in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if host]


# Application definition

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.staticfiles',

    'rest_framework',
    'drf_yasg',

    'delegations',
    'vehicles',
    'bookings',
    'reports',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'renting_drf.urls'

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

ASGI_APPLICATION = 'renting_drf.asgi.application'


# Database
# SQLite by default; point DB_ENGINE at postgresql in production so that
# SELECT ... FOR UPDATE row locks are honoured. SQLite ignores those locks, so
# its transactions take the write lock up front (BEGIN IMMEDIATE) instead.

DATABASES = {
    'default': {
        'ENGINE': os.getenv('DB_ENGINE', 'django.db.backends.sqlite3'),
        'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        'USER': os.getenv('DB_USER', ''),
        'PASSWORD': os.getenv('DB_PASSWORD', ''),
        'HOST': os.getenv('DB_HOST', ''),
        'PORT': os.getenv('DB_PORT', ''),
    }
}

if DATABASES['default']['ENGINE'] == 'django.db.backends.sqlite3':
    DATABASES['default']['OPTIONS'] = {
        'transaction_mode': 'IMMEDIATE',
        'timeout': int(os.getenv('DB_TIMEOUT', '20')),
    }
    # File-backed so that concurrent connections share one test database
    DATABASES['default']['TEST'] = {
        'NAME': os.getenv('DB_TEST_NAME', str(BASE_DIR / 'test_db.sqlite3')),
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Internationalization

LANGUAGE_CODE = 'en-us'

TIME_ZONE = os.getenv('DJANGO_TIME_ZONE', 'Europe/Madrid')

USE_I18N = True

USE_TZ = True


STATIC_URL = 'static/'


# Django REST Framework
# The back-office has no login; every endpoint is open.

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'renting_drf.renderers.ApiRenderer',
    ],
    'COERCE_DECIMAL_TO_STRING': True,
}

SWAGGER_SETTINGS = {
    'USE_SESSION_AUTH': False,
    'SECURITY_DEFINITIONS': {},
}

API_VERSION = '1.0'


# Rental business settings

RENTAL_TAX_RATE = Decimal(os.getenv('RENTAL_TAX_RATE', '0.21'))

VINTAGE_CUTOFF_YEAR = int(os.getenv('VINTAGE_CUTOFF_YEAR', '2000'))

READ_RETRY_ATTEMPTS = int(os.getenv('READ_RETRY_ATTEMPTS', '3'))

READ_RETRY_BACKOFF = float(os.getenv('READ_RETRY_BACKOFF', '0.05'))


# Celery

CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')
CELERY_TASK_ALWAYS_EAGER = env_bool('CELERY_TASK_ALWAYS_EAGER', False)
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE

CELERY_BEAT_SCHEDULE = {
    'sync-rented-flags': {
        'task': 'vehicles.tasks.sync_rented_flags_task',
        'schedule': crontab(hour=0, minute=5),
    },
}


# Logging

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO'),
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
