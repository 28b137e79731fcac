"""
Celery application configuration for the roster_management project.

The application reads its configuration from the Django settings module
using the ``CELERY_`` prefix and auto-discovers ``tasks`` modules across
all installed Django apps.
"""

import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "roster_management.config.settings.production")

app = Celery("roster_management")

# Using a string here means the worker doesn't need to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()
