"""
Configuration of the members app
"""
from django.apps import AppConfig


class MembersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'roster_management.apps.members'
    verbose_name = 'Roster'
