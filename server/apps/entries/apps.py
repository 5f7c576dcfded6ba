"""Django app configuration for entries app."""

from django.apps import AppConfig


class EntriesConfig(AppConfig):
    """Configuration for entries app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.entries'
    verbose_name = 'Entries'
