"""Main settings entry point.

Settings are composed from ``components/`` and an optional
``environments/<DJANGO_ENV>.py`` overlay.
"""

from os import environ

from split_settings.tools import include, optional

_ENV = environ.get('DJANGO_ENV') or 'development'

_base_settings = (
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/api.py',
    'components/sharing.py',
    # Select the right env:
    f'environments/{_ENV}.py',
    # Optionally override some settings:
    optional('environments/local.py'),
)

include(*_base_settings)
