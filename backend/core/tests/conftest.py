import logging

import pytest
from rest_framework.test import APIClient

from core import notifications as notifications_module
from core.realtime import RecordingPushNotifier
from core.tests.fixtures import CompanyFactory, JobSeekerFactory


@pytest.fixture(autouse=True)
def _test_settings(settings):
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    settings.REALTIME_REDIS_URL = ''
    settings.GEMINI_API_KEY = ''
    settings.CLOUDINARY_CLOUD_NAME = ''
    settings.CLOUDINARY_API_KEY = ''
    settings.CLOUDINARY_API_SECRET = ''
    settings.FRONTEND_BASE_URL = 'http://frontend.test'


@pytest.fixture
def push(monkeypatch):
    """Route every service's real-time events into an in-memory recorder."""
    recorder = RecordingPushNotifier()
    monkeypatch.setattr(notifications_module, 'get_push_notifier', lambda: recorder)
    return recorder


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def company():
    return CompanyFactory()


@pytest.fixture
def seeker():
    return JobSeekerFactory().user


@pytest.fixture
def company_client(company):
    client = APIClient()
    client.force_authenticate(user=company.owner)
    return client


@pytest.fixture
def seeker_client(seeker):
    client = APIClient()
    client.force_authenticate(user=seeker)
    return client


@pytest.fixture
def core_logs(caplog):
    """``caplog`` that also sees the ``core`` loggers, which do not propagate to root."""
    logger = logging.getLogger('core')
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.INFO, logger='core')
    yield caplog
    logger.removeHandler(caplog.handler)
