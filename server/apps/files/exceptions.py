"""Exceptions for files app."""

from typing import Final

_UPLOAD_ERROR_PREFIX: Final = 'Upload error'


class UploadValidationError(Exception):
    """Base class for upload input rejected before any store call."""


class MissingFileError(UploadValidationError):
    """Raised when the request carries no file payload."""

    def __init__(self) -> None:
        """Initialize MissingFileError."""
        super().__init__('No file uploaded')


class FileTooLargeError(UploadValidationError):
    """Raised when the payload exceeds the configured size limit."""

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        """Initialize FileTooLargeError.

        Args:
            size_bytes: Size of the rejected payload.
            max_bytes: Configured upload limit.
        """
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(f'{_UPLOAD_ERROR_PREFIX}: File too large')


class UnsupportedFileTypeError(UploadValidationError):
    """Raised when the MIME type is not on the allow-list."""

    def __init__(self, mime_type: str) -> None:
        """Initialize UnsupportedFileTypeError.

        Args:
            mime_type: Rejected MIME type.
        """
        self.mime_type = mime_type
        super().__init__(f'{_UPLOAD_ERROR_PREFIX}: Unsupported file type.')


class FileRecordNotFoundError(Exception):
    """Raised when a file record is absent or owned by someone else."""

    def __init__(self, file_id: object) -> None:
        """Initialize FileRecordNotFoundError.

        Args:
            file_id: Identifier that was looked up.
        """
        self.file_id = file_id
        super().__init__('File not found')


class StoreError(Exception):
    """Base class for metadata or object store failures."""

    def __init__(self, message: str, key: str | None = None) -> None:
        """Initialize StoreError.

        Args:
            message: Description of the failed operation.
            key: Storage key involved, if any.
        """
        self.key = key
        super().__init__(message)


class StoreWriteError(StoreError):
    """Raised when writing a record or an object fails."""


class StoreDeleteError(StoreError):
    """Raised when deleting a record or an object fails."""


class ScopeViolationError(StoreError):
    """Raised when a scoped client touches a key outside its user prefix."""
