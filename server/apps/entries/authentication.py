"""Shared-secret authentication for the management API."""

import logging
import secrets
from typing import Any, final, override

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from rest_framework.authentication import BaseAuthentication
from rest_framework.request import Request

logger = logging.getLogger(__name__)

AUTH_HEADER_TYPE = 'SharedSecret'


def get_shared_secret() -> str:
    """Get the secret expected in the Authorization header.

    Returns:
        Shared secret from settings, empty when unset.
    """
    return getattr(settings, 'SHARING_SHARED_SECRET', '')


@final
class SharedSecretAuthentication(BaseAuthentication):
    """Authenticate requests whose Authorization header is the shared secret.

    An unset secret never matches, so the API stays closed until one is
    configured. There are no user accounts: a match authenticates an
    anonymous caller and the secret becomes ``request.auth``.
    """

    @override
    def authenticate(self, request: Request) -> tuple[Any, str] | None:
        """Compare the Authorization header with the shared secret.

        Args:
            request: Incoming request.

        Returns:
            (user, secret) on a match, None otherwise.
        """
        secret = get_shared_secret()
        provided = request.headers.get('Authorization', '')
        if not secret or not provided:
            return None
        if not secrets.compare_digest(provided.encode(), secret.encode()):
            logger.warning(
                'Wrong shared secret: %s %s',
                request.method,
                request.path,
            )
            return None
        return AnonymousUser(), provided

    @override
    def authenticate_header(self, request: Request) -> str:
        """Value of WWW-Authenticate, which makes DRF answer 401."""
        return AUTH_HEADER_TYPE
