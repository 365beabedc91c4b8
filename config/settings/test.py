"""Test settings for the Fliq project.

Fast, isolated configuration for pytest-django: in-memory SQLite,
eager Celery, a fixed Paystack key for webhook signatures and a
locmem email backend.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

PAYSTACK_SECRET_KEY = 'sk_test_fliq_secret'
PAYSTACK_BASE_URL = 'https://api.paystack.test'
PAYSTACK_CALLBACK_URL = 'http://testserver/api/v1/finances/paystack/callback/'
CLIENT_DASHBOARD_URL = 'http://frontend.test/dashboard/client'

LOGGING['root']['level'] = 'ERROR'  # noqa: F405
LOGGING['loggers']['apps']['level'] = 'WARNING'  # noqa: F405
