"""DRF exception handler answering every API error as ``{"error": ...}``."""

import logging
from http import HTTPStatus
from typing import Any

from rest_framework.response import Response
from rest_framework.views import exception_handler

from server.apps.entries.exceptions import SharingError

logger = logging.getLogger(__name__)


def first_error_message(detail: Any) -> str:
    """Pick the first message out of a DRF error detail.

    Args:
        detail: String, list or dict of error details.

    Returns:
        First message found, depth first.
    """
    if isinstance(detail, dict):
        return first_error_message(next(iter(detail.values()), ''))
    if isinstance(detail, list):
        return first_error_message(detail[0] if detail else '')
    return str(detail)


def sharing_exception_handler(
    exc: Exception,
    context: dict[str, Any],
) -> Response | None:
    """Translate domain and DRF errors into a flat JSON error.

    Args:
        exc: Raised exception.
        context: View context supplied by DRF.

    Returns:
        Error response, or None to let Django handle the exception.
    """
    if isinstance(exc, SharingError):
        if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.warning('API request failed: %s', exc)
        return Response({'error': str(exc)}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {'error': first_error_message(response.data)}
    return response
