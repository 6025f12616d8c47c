"""Per-user metadata store over the File model."""

import logging
from typing import final

from django.db import DatabaseError, transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import (
    FileRecordNotFoundError,
    StoreDeleteError,
    StoreWriteError,
)
from server.apps.files.models import File

logger = logging.getLogger(__name__)


def _parse_file_id(file_id: int | str) -> int | None:
    try:
        return int(file_id)
    except (TypeError, ValueError):
        return None


@final
class MetadataStore:
    """File records of a single user.

    Every query is filtered on the owner, so ids belonging to other
    users behave exactly like ids that do not exist.
    """

    def __init__(self, user_id: int) -> None:
        """Bind the store to a user.

        Args:
            user_id: Owner whose records this store may touch.
        """
        self._user_id = user_id

    @property
    def user_id(self) -> int:
        """Owner of the records."""
        return self._user_id

    def _queryset(self) -> QuerySet[File]:
        return File.objects.filter(user_id=self._user_id)

    def list_files(self) -> list[File]:
        """List the user's records, newest first.

        Returns:
            Records ordered by created_at descending; empty if none.
        """
        return list(self._queryset().order_by('-created_at', '-id'))

    def insert_file(self, name: str, size: int, mime_type: str) -> File:
        """Insert a record owned by this store's user.

        Args:
            name: Stored name ``{epoch_ms}-{original_name}``.
            size: Payload size in bytes.
            mime_type: MIME type of the payload.

        Returns:
            Created record.

        Raises:
            StoreWriteError: On constraint violation or database failure.
        """
        try:
            with transaction.atomic():
                file_instance = File.objects.create(
                    user_id=self._user_id,
                    name=name,
                    size=size,
                    mime_type=mime_type,
                )
        except DatabaseError as error:
            logger.exception('Failed to insert file record: %s', name)
            raise StoreWriteError(
                f'Failed to insert file record: {name}',
            ) from error

        logger.info(
            'File record created in database: %s (ID: %d)',
            name,
            file_instance.id,
        )
        return file_instance

    def get_file(self, file_id: int | str) -> File:
        """Fetch one of the user's records.

        Args:
            file_id: Record id, as taken from the URL.

        Returns:
            Matching record.

        Raises:
            FileRecordNotFoundError: If absent, not owned, or not an id.
        """
        parsed_id = _parse_file_id(file_id)
        if parsed_id is None:
            raise FileRecordNotFoundError(file_id)

        file_instance = self._queryset().filter(id=parsed_id).first()
        if file_instance is None:
            raise FileRecordNotFoundError(file_id)
        return file_instance

    def delete_file(self, file_id: int | str) -> None:
        """Delete one of the user's records.

        Args:
            file_id: Record id.

        Raises:
            FileRecordNotFoundError: If absent or not owned.
            StoreDeleteError: On database failure.
        """
        parsed_id = _parse_file_id(file_id)
        if parsed_id is None:
            raise FileRecordNotFoundError(file_id)

        try:
            with transaction.atomic():
                deleted, _ = self._queryset().filter(id=parsed_id).delete()
        except DatabaseError as error:
            logger.exception('Failed to delete file record: ID=%s', file_id)
            raise StoreDeleteError(
                f'Failed to delete file record: {file_id}',
            ) from error

        if not deleted:
            raise FileRecordNotFoundError(file_id)
        logger.info('File record deleted from database: ID=%d', parsed_id)
