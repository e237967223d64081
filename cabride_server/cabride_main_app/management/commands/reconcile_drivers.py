"""Management command to repair drivers pointing at missing or finished bookings"""
from django.core.management.base import BaseCommand
from django.db import transaction
from cabride_main_app.models import Driver
from cabride_main_app.services import DriverService


class Command(BaseCommand):
    help = 'Clear stale current bookings on drivers and restore their availability'

    def add_arguments(self, parser):
        parser.add_argument('--dry-run', action='store_true', help='Only report drivers that would be repaired')

    def handle(self, *args, **options):
        service = DriverService()
        driver_ids = list(Driver.objects.filter(current_booking__isnull=False).values_list('id', flat=True))

        if not driver_ids:
            self.stdout.write('No drivers hold a booking reference')
            return

        self.stdout.write(f'Checking {len(driver_ids)} drivers...')

        repaired = 0
        for driver_id in driver_ids:
            with transaction.atomic():
                driver = Driver.objects.select_for_update().get(pk=driver_id)
                if options['dry_run']:
                    if service.is_stale(driver):
                        self.stdout.write(f'Driver {driver.id} holds stale booking {driver.current_booking_id}')
                        repaired += 1
                elif service.reconcile(driver):
                    repaired += 1

        verb = 'would be repaired' if options['dry_run'] else 'repaired'
        self.stdout.write(self.style.SUCCESS(f'Completed: {repaired}/{len(driver_ids)} drivers {verb}'))
