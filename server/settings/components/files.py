"""Upload policy settings.

The policy is fixed at startup and only read afterwards.
"""

from typing import Final

from server.settings.components import config

# 5 MiB per uploaded file
FILES_MAX_UPLOAD_SIZE = config(
    'FILES_MAX_UPLOAD_SIZE',
    cast=int,
    default=5 * 1024 * 1024,
)

FILES_ALLOWED_MIME_TYPES: Final = frozenset((
    'image/jpeg',
    'image/png',
    'image/gif',
    'application/pdf',
    'text/plain',
))

# Room for multipart boundaries and part headers when the request
# body size is checked against FILES_MAX_UPLOAD_SIZE
FILES_MULTIPART_OVERHEAD = config(
    'FILES_MULTIPART_OVERHEAD',
    cast=int,
    default=64 * 1024,
)

# Uploads within the limit stay in memory instead of a temp file
FILE_UPLOAD_MAX_MEMORY_SIZE = FILES_MAX_UPLOAD_SIZE
