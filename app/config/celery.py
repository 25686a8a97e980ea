"""
Celery application.

Runs the chat's best-effort background work:
- chat.tasks.record_channel_activity (touch + mark seen after a send)
- chat.tasks.delete_channel_messages (messages of a deleted channel)

Redis is the broker and result backend (CELERY_BROKER_URL). Tasks are
auto-discovered from the installed apps' tasks.py modules. Under test,
CELERY_TASK_ALWAYS_EAGER runs them inline.

Worker:
    celery -A config worker -l info
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
