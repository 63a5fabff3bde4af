"""Management command to load the reference geography of Tajikistan."""
import json

from django.core.management.base import BaseCommand, CommandError

from apps.common.core.exceptions import DomainException
from apps.common.locations.models import NodeKind, child_kinds_of
from apps.common.locations.seed import GEOGRAPHY
from apps.common.locations.services import SEED_CHILD_KEYS, LocationService


def _format_counts(counts):
    return ', '.join(f"{counts.get(kind, 0)} {label.lower()}" for kind, label in NodeKind.choices)


def _count_entries(entries, kind, totals):
    for entry in entries:
        totals[kind] = totals.get(kind, 0) + 1
        for child_kind in child_kinds_of(kind):
            _count_entries(entry.get(SEED_CHILD_KEYS[child_kind], []), child_kind, totals)
    return totals


class Command(BaseCommand):
    help = 'Load provinces, cities, districts and their subdivisions with translations'

    def add_arguments(self, parser):
        parser.add_argument(
            '--file',
            help='JSON file with the same nested structure as the built-in dataset',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be loaded without saving anything',
        )
        parser.add_argument(
            '--force',
            action='store_true',
            help='Delete existing locations before loading (addresses are detached, not deleted)',
        )
        parser.add_argument(
            '--stats',
            action='store_true',
            help='Show current database statistics',
        )

    def handle(self, *args, **options):
        if options['stats']:
            stats = LocationService.get_statistics()
            self.stdout.write(self.style.SUCCESS(f"Current database: {_format_counts(stats)}"))
            return

        data = GEOGRAPHY
        if options['file']:
            try:
                with open(options['file'], encoding='utf-8') as fh:
                    data = json.load(fh)
            except (OSError, ValueError) as e:
                raise CommandError(f"Cannot read {options['file']}: {e}")

        if options['dry_run']:
            self.stdout.write(self.style.WARNING('DRY RUN - No data will be saved'))
            totals = _count_entries(data, NodeKind.PROVINCE, {})
            self.stdout.write(f"Found {_format_counts(totals)}")
            self.stdout.write(self.style.SUCCESS('Dry run completed. Use without --dry-run to load.'))
            return

        if options['force']:
            self.stdout.write(self.style.WARNING('FORCE mode - existing locations will be deleted'))

        try:
            counts = LocationService.load_seed(data, force=options['force'])
        except DomainException as e:
            raise CommandError(f'Load failed: {e}')

        self.stdout.write(self.style.SUCCESS(f"Created: {_format_counts(counts)}"))
        stats = LocationService.get_statistics()
        self.stdout.write(self.style.SUCCESS(f"Total in database: {_format_counts(stats)}"))
