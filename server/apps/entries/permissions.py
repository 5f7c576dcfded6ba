"""API permissions for entries app."""

from typing import Any, final, override

from rest_framework import permissions
from rest_framework.request import Request


@final
class HasSharedSecret(permissions.BasePermission):
    """Allow only requests authenticated with the shared secret."""

    @override
    def has_permission(self, request: Request, view: Any) -> bool:
        return request.auth is not None
