"""Django storage configuration for S3-compatible backends.

This module configures django-storages to work with:
- MinIO for local development
- Any S3-compatible service (AWS S3, Cloudflare R2) in production

Blob keys are entry ids, so every object lives at the bucket root.
"""

from typing import Any, Final

from server.settings.components import config

# Uses S3-compatible storage for entry blobs, local storage for static files
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.entries.infrastructure.storage.BlobStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='quickshare',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default='minioadmin'),
            'secret_key': config(
                'AWS_SECRET_ACCESS_KEY',
                default='minioadmin',
            ),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            # Keys are freshly minted entry ids, never user-chosen names
            'file_overwrite': True,
            'default_acl': None,  # Inherit bucket ACL
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
