"""Management command to remove objects left without a file record."""

import logging
from typing import Any, Final

from django.core.management.base import BaseCommand, CommandError

from server.apps.files.infrastructure.clients import service_client
from server.apps.files.logic.reconciliation import (
    is_backed_by_record,
    reconcile_orphans,
)
from server.apps.files.models import OrphanedObject

_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Retry removal of orphaned objects queued in the ledger."""

    help = 'Remove stored objects whose file record is gone'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be removed without removing',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max objects to process (default: {_DEFAULT_BATCH_SIZE})',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconciliation.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']
        if batch_size < 1:
            raise CommandError('--batch-size must be at least 1')

        pending = OrphanedObject.objects.count()
        self.stdout.write(f'Found {pending} orphaned objects in the ledger')

        if dry_run:
            orphans = OrphanedObject.objects.order_by(
                'created_at',
                'id',
            )[:batch_size]
            for orphan in orphans:
                if is_backed_by_record(orphan):
                    self.stdout.write(
                        f'Would drop (live record): {orphan.key}',
                    )
                    continue
                self.stdout.write(
                    f'Would remove: {orphan.key} '
                    f'(reason: {orphan.reason}, '
                    f'attempts: {orphan.attempts})',
                )
            self.stdout.write(
                self.style.SUCCESS(
                    f'Would process {min(pending, batch_size)} orphaned objects',
                ),
            )
            return

        report = reconcile_orphans(service_client(), batch_size)
        logger.info(
            'Reconciliation finished: %d removed, %d failed, %d skipped',
            report.removed,
            report.failed,
            report.skipped,
        )
        self.stdout.write(
            self.style.SUCCESS(
                f'Removed {report.removed} orphaned objects, '
                f'{report.failed} failed, {report.skipped} skipped',
            ),
        )
