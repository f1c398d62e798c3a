# vm_core/access_codes/management/commands/recycle_expired_codes.py
from __future__ import annotations

from django.core.management.base import BaseCommand

from vm_core.access_codes.selectors import AccessCodeSelector
from vm_core.access_codes.services import AccessCodeService
from vm_core.common.clock import read_clock


class Command(BaseCommand):
    help = "Mark active access codes whose visit window has closed as expired. Safe to run repeatedly."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Print counts only; do not write.")

    def handle(self, *args, **opts):
        clock = read_clock()

        if opts["dry_run"]:
            pending = AccessCodeSelector.stale_active_codes(clock=clock).count()
            self.stdout.write(f"DRY RUN: codes that would be expired: {pending}")
            return

        count = AccessCodeService.recycle_expired(at=clock.instant)
        self.stdout.write(self.style.SUCCESS(f"Codes expired: {count}"))
