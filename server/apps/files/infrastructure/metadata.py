"""Storage key and MIME type helpers for files."""

import mimetypes
import posixpath
import time
from pathlib import PurePosixPath
from typing import Final

from server.apps.files.exceptions import ScopeViolationError

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str) -> str:
    """Guess MIME type from the filename extension.

    Used only when the uploader declared no content type.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def extract_filename(path: str) -> str:
    """Extract the last component of a path.

    Args:
        path: Path or bare name (e.g., '123/1700000000000-file.pdf').

    Returns:
        Filename (e.g., '1700000000000-file.pdf').
    """
    return PurePosixPath(path.replace('\\', '/')).name


def current_timestamp_ms() -> int:
    """Milliseconds since the epoch, used to keep stored names apart."""
    return time.time_ns() // 1_000_000


def build_stored_name(
    original_name: str,
    timestamp_ms: int,
    max_length: int | None = None,
) -> str:
    """Build the stored name ``{epoch_ms}-{original_name}``.

    When the result would exceed ``max_length`` the filename stem is
    shortened; the extension is kept whenever it fits.

    Args:
        original_name: Filename as uploaded, path components are dropped.
        timestamp_ms: Upload time in epoch milliseconds.
        max_length: Optional limit for the whole stored name.

    Returns:
        Stored name.
    """
    prefix = f'{timestamp_ms}-'
    filename = extract_filename(original_name)
    if max_length is None or len(prefix) + len(filename) <= max_length:
        return f'{prefix}{filename}'

    room = max_length - len(prefix)
    stem, extension = posixpath.splitext(filename)
    if len(extension) < room:
        return f'{prefix}{stem[:room - len(extension)]}{extension}'
    return f'{prefix}{filename[:room]}'


def build_storage_key(user_id: int, stored_name: str) -> str:
    """Build the object key ``{user_id}/{stored_name}``.

    Args:
        user_id: Owner's user ID.
        stored_name: Name produced by build_stored_name.

    Returns:
        Object key.
    """
    return f'{user_id}/{stored_name}'


def validate_storage_path(user_id: int, storage_path: str) -> None:
    """Validate storage path follows user isolation rules.

    Ensures the storage path is a single name under the user's ID
    prefix. This is the object store side of per-user isolation.

    Args:
        user_id: Owner's user ID.
        storage_path: Proposed storage path.

    Raises:
        ScopeViolationError: If the path is outside the user's prefix.
    """
    if not storage_path:
        raise ScopeViolationError('Storage path cannot be empty')

    path_parts = PurePosixPath(storage_path).parts
    if len(path_parts) != 2 or '..' in path_parts:
        raise ScopeViolationError(
            'Storage path must be {user_id}/{name}',
            key=storage_path,
        )

    first_component = path_parts[0]

    # Check if first component matches user_id
    try:
        path_user_id = int(first_component)
    except ValueError as error:
        raise ScopeViolationError(
            'Storage path must start with user ID',
            key=storage_path,
        ) from error

    if path_user_id != user_id:
        raise ScopeViolationError(
            f'Storage path user ID ({path_user_id}) does not match '
            f'owner ({user_id})',
            key=storage_path,
        )
