"""Orphan ledger and its reconciliation.

Objects that outlive their record (failed upload rollback, failed
delete cleanup) are queued in OrphanedObject. Removal is retried by
the reconcile_orphans management command through a ServiceClient.
"""

import logging
from typing import TYPE_CHECKING, NamedTuple

from django.db import DatabaseError, transaction

from server.apps.files.infrastructure.metadata import extract_filename
from server.apps.files.models import File, OrphanedObject

if TYPE_CHECKING:
    from server.apps.files.infrastructure.clients import ServiceClient

logger = logging.getLogger(__name__)


class ReconcileReport(NamedTuple):
    """Counts from one reconciliation run."""

    removed: int
    failed: int
    skipped: int


def record_orphan(
    key: str,
    user_id: int,
    reason: str,
    error: BaseException | None = None,
) -> OrphanedObject | None:
    """Queue an object that could not be removed.

    Recording the same key again bumps its attempt counter. A failure
    to write the ledger is logged and not raised, so it never masks
    the error the caller is already handling.

    Args:
        key: Object key ``{user_id}/{name}``.
        user_id: Owner of the object.
        reason: OrphanedObject.Reason value.
        error: Failure that left the object behind.

    Returns:
        Ledger row, or None if it could not be written.
    """
    last_error = str(error) if error else ''
    try:
        with transaction.atomic():
            orphan, created = OrphanedObject.objects.get_or_create(
                key=key,
                defaults={
                    'user_id': user_id,
                    'reason': reason,
                    'last_error': last_error,
                },
            )
            if not created:
                orphan.attempts += 1
                orphan.last_error = last_error
                orphan.save(
                    update_fields=['attempts', 'last_error', 'last_attempt_at'],
                )
    except DatabaseError:
        logger.exception('Failed to record orphaned object: %s', key)
        return None

    logger.warning(
        'Orphaned object queued for reconciliation: %s (%s)',
        key,
        reason,
    )
    return orphan


def is_backed_by_record(orphan: OrphanedObject) -> bool:
    """Check whether a file record still points at the orphan's key."""
    return File.objects.filter(
        user_id=orphan.user_id,
        name=extract_filename(orphan.key),
    ).exists()


def reconcile_orphans(
    client: 'ServiceClient',
    batch_size: int,
) -> ReconcileReport:
    """Retry removal of queued orphans, oldest first.

    A key that has meanwhile gained a record is dropped from the
    ledger without touching the object.

    Args:
        client: Privileged client able to remove any object.
        batch_size: Maximum number of ledger rows to process.

    Returns:
        ReconcileReport with removed, failed and skipped counts.
    """
    removed = 0
    failed = 0
    skipped = 0

    orphans = OrphanedObject.objects.order_by('created_at', 'id')[:batch_size]
    for orphan in orphans:
        if is_backed_by_record(orphan):
            logger.warning(
                'Orphan ledger entry has a live record, dropping: %s',
                orphan.key,
            )
            orphan.delete()
            skipped += 1
            continue

        try:
            if client.object_exists(orphan.key):
                client.remove_object(orphan.key)
        except Exception as exc:
            orphan.attempts += 1
            orphan.last_error = str(exc)
            orphan.save(
                update_fields=['attempts', 'last_error', 'last_attempt_at'],
            )
            logger.exception('Failed to remove orphaned object: %s', orphan.key)
            failed += 1
            continue

        logger.info(
            'Removed orphaned object: %s (after %d attempts)',
            orphan.key,
            orphan.attempts,
        )
        orphan.delete()
        removed += 1

    return ReconcileReport(removed=removed, failed=failed, skipped=skipped)
