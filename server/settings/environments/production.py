"""Settings for production deployments."""

from server.settings.components import config

DEBUG = False

ALLOWED_HOSTS = config(
    'DJANGO_ALLOWED_HOSTS',
    cast=lambda raw: [host.strip() for host in raw.split(',') if host.strip()],
    default='',
)
