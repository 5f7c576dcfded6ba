"""Django REST Framework settings for the JSON API."""

# Every view requires the shared secret unless it opts out (public routes)
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'server.apps.entries.authentication.SharedSecretAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'server.apps.entries.permissions.HasSharedSecret',
    ),
    'DEFAULT_RENDERER_CLASSES': (
        'rest_framework.renderers.JSONRenderer',
    ),
    'DEFAULT_PARSER_CLASSES': (
        'rest_framework.parsers.JSONParser',
        'rest_framework.parsers.FormParser',
        'rest_framework.parsers.MultiPartParser',
    ),
    'EXCEPTION_HANDLER': (
        'server.apps.entries.exception_handler.sharing_exception_handler'
    ),
    'UNAUTHENTICATED_USER': None,
}
