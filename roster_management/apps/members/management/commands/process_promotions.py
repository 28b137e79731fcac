"""
Run the daily promotion sweep by hand

Normally the sweep runs from Celery beat; this command runs it for today or
for a given date, e.g. to catch up after downtime.

Usage:
    python manage.py process_promotions
    python manage.py process_promotions --date 2025-10-01
    python manage.py process_promotions --dry-run --verbose
"""
from datetime import date

from django.core.management.base import BaseCommand, CommandError

from roster_management.apps.members.application.services import PromotionApplicationService
from roster_management.apps.members.domain.clock import FixedClock
from roster_management.apps.members.infrastructure.clock import SystemClock


class Command(BaseCommand):
    help = 'Apply due board promotions and time-based promotions across the roster'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=str,
            help='Date to process in YYYY-MM-DD format (defaults to today)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report the promotions without saving them',
        )
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='List every promoted member',
        )

    def handle(self, *args, **options):
        if options['date']:
            try:
                clock = FixedClock(date.fromisoformat(options['date']))
            except ValueError:
                raise CommandError(f"Invalid date: {options['date']}. Use YYYY-MM-DD")
        else:
            clock = SystemClock()

        service = PromotionApplicationService(clock=clock)
        dry_run = options['dry_run']
        result = service.process_auto_promotions(dry_run=dry_run)

        self.stdout.write(f"Processing promotions for {result.today}")
        if options['verbose']:
            for member in result.updated:
                self.stdout.write(f"  - {member.row_id}: {member} (DOR {member.dor_date})")
        for row_id in result.failed:
            self.stderr.write(self.style.ERROR(f"  Could not save promotion for {row_id}"))

        if not result.changed:
            self.stdout.write(self.style.WARNING("No promotions due"))
        elif dry_run:
            self.stdout.write(self.style.SUCCESS(f"Would promote {len(result.updated)} member(s)"))
        else:
            self.stdout.write(self.style.SUCCESS(f"Promoted {len(result.updated)} member(s)"))
