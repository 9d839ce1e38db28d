"""
Management command: repair_timeline
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Collapses duplicate timeline entries, synthesizes a missing "Report
Submitted" entry and realigns ``current_step`` with the ledger.

Idempotent: a second run over the same cases reports no changes.

Usage::

    python manage.py repair_timeline FRD-123456-AB12 FRD-654321-CD34
    python manage.py repair_timeline --all
"""

from django.core.management.base import BaseCommand, CommandError

from cases.models import Case
from cases.timeline import TimelineLedger
from core.domain.access import SYSTEM_ACTOR
from core.domain.exceptions import DomainError


class Command(BaseCommand):
    help = (
        "Repairs case timelines: removes duplicate stage entries and "
        "realigns current_step.  Safe to run multiple times."
    )

    def add_arguments(self, parser):
        parser.add_argument("case_ids", nargs="*", help="Case IDs (FRD-…) to repair.")
        parser.add_argument(
            "--all",
            action="store_true",
            dest="all_cases",
            help="Repair every case in the database.",
        )

    def handle(self, *args, **options):
        case_ids = options["case_ids"]
        if options["all_cases"]:
            case_ids = list(Case.objects.order_by("pk").values_list("case_id", flat=True))
        elif not case_ids:
            raise CommandError("Pass one or more case IDs, or --all.")

        self.stdout.write(self.style.MIGRATE_HEADING(
            f"\nRepairing {len(case_ids)} case timeline(s)\n"
        ))

        changed = 0
        for case_id in case_ids:
            try:
                report = TimelineLedger.repair(case_id, actor=SYSTEM_ACTOR)
            except DomainError as exc:
                raise CommandError(f"{case_id}: {exc.message}") from exc

            if report.changed:
                changed += 1
                self.stdout.write(self.style.WARNING(
                    f"  ✔  {report.case_id}: removed={report.removed} "
                    f"synthesized={report.synthesized} "
                    f"step {report.step_before} → {report.step_after}"
                ))
            else:
                self.stdout.write(f"  ·  {report.case_id}: consistent")

        self.stdout.write(self.style.SUCCESS(
            f"\n  Done!  {changed} of {len(case_ids)} case(s) repaired.\n"
        ))
