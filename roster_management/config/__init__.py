"""
Initialisation for the roster_management Django project.

Importing the Celery application here makes sure tasks are auto-discovered
whenever Django starts, so ``shared_task`` functions bind to this app.
"""

from .celery import app as celery_app

__all__ = ["celery_app"]
