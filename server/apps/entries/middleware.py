"""Request middleware for entries app."""

from collections.abc import Callable
from typing import final

from django.http import HttpRequest, HttpResponse

from server.apps.entries.logic.expiration_operations import (
    maybe_sweep_expired_entries,
)


@final
class ExpirationSweepMiddleware:
    """Sweep expired entries at the start of ordinary requests.

    Sweeps are debounced per process, so most requests only pay for a
    timestamp comparison.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        """Initialize the middleware.

        Args:
            get_response: Next handler in the middleware chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Sweep if due, then handle the request.

        Args:
            request: Incoming request.

        Returns:
            Response from the rest of the chain.
        """
        if request.method != 'OPTIONS':
            maybe_sweep_expired_entries()
        return self.get_response(request)
