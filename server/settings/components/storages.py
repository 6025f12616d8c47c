"""Django storage configuration for the S3-compatible object store.

This module configures django-storages to work with:
- MinIO for local development
- AWS S3 or Cloudflare R2 for production (R2 needs region ``auto``)

All of them speak the S3 API and use the same S3Storage backend.
"""

from typing import Any, Final

from server.settings.components import config

# User files go to the S3 bucket, static files stay local.
# Missing credentials fall back to the boto3 credential chain.
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='filebox',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'file_overwrite': False,  # Never replace another upload
            'default_acl': None,  # Inherit bucket ACL
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
