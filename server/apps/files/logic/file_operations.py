"""Business logic for file operations.

Uploads and deletes touch two independent stores, the object store
and the metadata store, with no transaction spanning both. The order
of the steps is what keeps them consistent:

- upload writes the object first and the record second; if the record
  cannot be written the object is removed again.
- delete removes the record first and the object second; if the object
  cannot be removed the caller still gets success and the object is
  queued for reconciliation.

A leftover object without a record can be cleaned up later. A record
pointing at nothing would be visible to the user, so it is never risked.
"""

import logging
from typing import NamedTuple

from django.conf import settings
from django.core.files.uploadedfile import UploadedFile

from server.apps.files.exceptions import (
    FileRecordNotFoundError,
    FileTooLargeError,
    MissingFileError,
    StoreDeleteError,
    StoreWriteError,
    UnsupportedFileTypeError,
    UploadValidationError,
)
from server.apps.files.infrastructure.clients import ScopedClient
from server.apps.files.infrastructure.metadata import (
    build_storage_key,
    build_stored_name,
    current_timestamp_ms,
    detect_mime_type,
    extract_filename,
)
from server.apps.files.logic.operation_state import (
    OperationState,
    OperationTracker,
)
from server.apps.files.logic.reconciliation import record_orphan
from server.apps.files.models import File, OrphanedObject

logger = logging.getLogger(__name__)


class UploadResult(NamedTuple):
    """Outcome of a successful upload."""

    path: str
    record: File
    state: OperationState


class DeleteResult(NamedTuple):
    """Outcome of a successful delete."""

    record: File
    object_removed: bool
    state: OperationState


def get_max_upload_size() -> int:
    """Get the upload size limit in bytes.

    Returns:
        Limit from settings or default of 5 MiB.
    """
    return getattr(settings, 'FILES_MAX_UPLOAD_SIZE', 5 * 1024 * 1024)


def get_multipart_overhead() -> int:
    """Get the allowance for multipart framing around the file bytes.

    Returns:
        Overhead in bytes from settings or default of 64 KiB.
    """
    return getattr(settings, 'FILES_MULTIPART_OVERHEAD', 64 * 1024)


def get_allowed_mime_types() -> frozenset[str]:
    """Get the MIME types accepted for upload.

    Returns:
        Allow-list from settings.
    """
    return frozenset(getattr(settings, 'FILES_ALLOWED_MIME_TYPES', ()))


def get_stored_name_max_length() -> int:
    """Get the longest stored name a file record can hold.

    Returns:
        max_length of File.name.
    """
    return File._meta.get_field('name').max_length  # noqa: SLF001


def validate_upload(upload: UploadedFile | None) -> str:
    """Check an upload against the policy without touching any store.

    The declared content type wins; the filename is only consulted
    when nothing was declared.

    Args:
        upload: Uploaded file from the request, None if absent.

    Returns:
        MIME type to store the file under.

    Raises:
        MissingFileError: If there is no file.
        FileTooLargeError: If the file is over the size limit.
        UnsupportedFileTypeError: If the type is not allow-listed.
    """
    if upload is None:
        raise MissingFileError

    max_size = get_max_upload_size()
    if upload.size > max_size:
        raise FileTooLargeError(upload.size, max_size)

    mime_type = upload.content_type or detect_mime_type(upload.name or '')
    if mime_type not in get_allowed_mime_types():
        raise UnsupportedFileTypeError(mime_type)

    return mime_type


def upload_file(
    client: ScopedClient,
    upload: UploadedFile | None,
    timestamp_ms: int | None = None,
) -> UploadResult:
    """Store an uploaded file and record its metadata.

    Transaction safety: upload to storage first, then create the
    record. If the record cannot be created, the uploaded object is
    deleted from storage (rollback). If even that fails, the object
    is logged and queued in the orphan ledger.

    Args:
        client: Data client scoped to the uploader.
        upload: Uploaded file from the request.
        timestamp_ms: Upload time in epoch milliseconds, now if omitted.

    Returns:
        UploadResult with the storage key and the created record.

    Raises:
        UploadValidationError: If the upload breaks the policy.
        StoreWriteError: If the object or the record cannot be written.
    """
    original_name = extract_filename(upload.name or '') if upload else ''
    tracker = OperationTracker('upload', original_name or '<missing>')

    try:
        mime_type = validate_upload(upload)
    except UploadValidationError:
        tracker.advance(OperationState.FAILED)
        raise

    if timestamp_ms is None:
        timestamp_ms = current_timestamp_ms()
    name_max_length = get_stored_name_max_length()
    stored_name = build_stored_name(
        original_name,
        timestamp_ms,
        max_length=name_max_length,
    )
    storage_key = build_storage_key(client.user_id, stored_name)
    key_max_length = len(storage_key) - len(stored_name) + name_max_length
    size = upload.size

    # Step 1: Upload to storage first
    tracker.advance(OperationState.WRITING_PRIMARY)
    try:
        saved_key = client.storage.put_object(
            storage_key,
            upload.read(),
            mime_type,
            max_length=key_max_length,
        )
    except StoreWriteError:
        logger.exception('Failed to upload file to storage: %s', storage_key)
        tracker.advance(OperationState.FAILED)
        raise

    # Storage may pick another name if the key was taken
    stored_name = extract_filename(saved_key)

    # Step 2: Create database record
    tracker.advance(OperationState.WRITING_SECONDARY)
    try:
        record = client.records.insert_file(
            name=stored_name,
            size=size,
            mime_type=mime_type,
        )
    except StoreWriteError as error:
        logger.error(
            'Database insert failed, rolling back storage upload: %s',
            saved_key,
        )
        tracker.advance(OperationState.COMPENSATING)
        _compensate_upload(client, saved_key, error)
        tracker.advance(OperationState.FAILED)
        raise

    tracker.advance(OperationState.DONE)
    logger.info(
        'Upload complete: %s (%d bytes, %s)',
        saved_key,
        size,
        mime_type,
    )
    return UploadResult(path=saved_key, record=record, state=tracker.state)


def _compensate_upload(
    client: ScopedClient,
    saved_key: str,
    cause: Exception,
) -> None:
    if client.storage.rollback_object(saved_key):
        return

    logger.error(
        'Upload rollback failed, object has no record: %s',
        saved_key,
    )
    record_orphan(
        key=saved_key,
        user_id=client.user_id,
        reason=OrphanedObject.Reason.UPLOAD_ROLLBACK,
        error=cause,
    )


def list_files(client: ScopedClient) -> list[File]:
    """List the caller's files, newest first.

    Args:
        client: Data client scoped to the caller.

    Returns:
        File records; empty list if the caller has none.
    """
    return client.records.list_files()


def delete_file(client: ScopedClient, file_id: int | str) -> DeleteResult:
    """Delete a file record and its stored object.

    Transaction safety: delete the record first, then the object.
    A failed object removal is logged and queued for reconciliation;
    the delete still counts as successful because the record is gone.

    Args:
        client: Data client scoped to the caller.
        file_id: Id of the record to delete.

    Returns:
        DeleteResult with the deleted record and whether its object
        was removed.

    Raises:
        FileRecordNotFoundError: If the caller owns no such record.
        StoreDeleteError: If the record cannot be deleted.
    """
    tracker = OperationTracker('delete', str(file_id))

    try:
        record = client.records.get_file(file_id)
    except FileRecordNotFoundError:
        logger.info('File not found for user %d: ID=%s', client.user_id, file_id)
        tracker.advance(OperationState.FAILED)
        raise

    storage_key = build_storage_key(client.user_id, record.name)
    logger.info('Deleting file: ID=%d, path=%s', record.id, storage_key)

    # Step 1: Delete from database
    tracker.advance(OperationState.WRITING_PRIMARY)
    try:
        client.records.delete_file(record.id)
    except (FileRecordNotFoundError, StoreDeleteError):
        tracker.advance(OperationState.FAILED)
        raise

    # Step 2: Delete from storage (best effort)
    tracker.advance(OperationState.WRITING_SECONDARY)
    object_removed = True
    try:
        client.storage.remove_object(storage_key)
    except StoreDeleteError as error:
        object_removed = False
        logger.warning(
            'Storage cleanup failed, orphaned file: %s',
            storage_key,
        )
        record_orphan(
            key=storage_key,
            user_id=client.user_id,
            reason=OrphanedObject.Reason.DELETE_CLEANUP,
            error=error,
        )

    tracker.advance(OperationState.DONE)
    return DeleteResult(
        record=record,
        object_removed=object_removed,
        state=tracker.state,
    )
