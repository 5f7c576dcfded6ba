"""Django app configuration for guest_links app."""

from django.apps import AppConfig


class GuestLinksConfig(AppConfig):
    """Configuration for guest_links app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.guest_links'
    verbose_name = 'Guest Links'
