"""
Project-wide pytest setup.

Settings are adjusted once so the suite runs without Redis, a broker or
TLS. Shared fixtures live in each app's tests/conftest.py.
"""

import os

import django
import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

INTEGRATION_FILES = {
    "test_views.py",
    "test_services.py",
    "test_tasks.py",
    "test_consumers.py",
    "test_health_check.py",
}
UNIT_FILES = {
    "test_models.py",
    "test_policies.py",
    "test_signals.py",
    "test_field_tracker.py",
    "test_exception_handler.py",
}


def pytest_configure():
    django.setup()

    from django.conf import settings

    from config.celery import app as celery_app

    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}
    # DEBUG is off by default, which would redirect every test request
    settings.SECURE_SSL_REDIRECT = False
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

    settings.CACHES = {
        "default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}
    }
    settings.CHANNEL_LAYERS = {
        "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}
    }

    # Tasks scheduled by signals and services run inline
    settings.CELERY_TASK_ALWAYS_EAGER = True
    celery_app.conf.task_always_eager = True


def pytest_collection_modifyitems(items):
    """
    Mark tests unit or integration by file name unless already marked.

    Unknown files count as integration, since most of them use the database.
    """
    for item in items:
        if {m.name for m in item.iter_markers()} & {"unit", "integration", "e2e"}:
            continue

        filename = os.path.basename(str(item.fspath))
        if filename in UNIT_FILES:
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)
