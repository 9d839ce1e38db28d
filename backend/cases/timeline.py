"""
cases.timeline — Append-only audit ledger of completed stages.

Only two writers exist: ``TimelineLedger.append`` (called by the
case-flow engine inside its locked transaction) and
``TimelineLedger.repair`` (maintenance of legacy or duplicated data).
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from django.db.models import F, QuerySet
from django.utils import timezone

from accounts.models import UserRole
from core.domain.access import SYSTEM_ACTOR, SYSTEM_ROLE, Actor, require_role
from core.domain.exceptions import ConcurrentTransition, DuplicateTimelineEntry
from core.domain.transactions import atomic_write, compare_and_set, lock_for_update

from .models import Case, TimelineEntry, case_lookup
from .stages import FIRST_STEP, get_stage, is_valid_step, status_for_step, step_for_status

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


def _step_of(slug: str) -> int | None:
    try:
        return int(step_for_status(slug))
    except ValueError:
        return None


@dataclass(frozen=True)
class RepairReport:
    case_id: str
    removed: int
    synthesized: bool
    step_before: int
    step_after: int

    @property
    def changed(self) -> bool:
        return bool(self.removed or self.synthesized or self.step_before != self.step_after)

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["changed"] = self.changed
        return data


class TimelineLedger:
    """Read and write access to ``case_timeline``."""

    @staticmethod
    def append(
        case: Case,
        step: int,
        description: str,
        actor: Actor,
        *,
        metadata: dict[str, Any] | None = None,
    ) -> TimelineEntry:
        """
        Record that ``case`` completed ``step``.

        Must run inside the transaction holding the case row lock.

        Raises:
            DuplicateTimelineEntry: An entry for this stage already exists.
        """
        stage = get_stage(step)
        if TimelineEntry.objects.filter(case=case, stage=stage.slug).exists():
            raise DuplicateTimelineEntry(stage.slug)

        now = timezone.now()
        return TimelineEntry.objects.create(
            case=case,
            stage=stage.slug,
            label=stage.label,
            description=description or stage.description,
            completed_at=now,
            created_at=now,
            actor_id=actor.id,
            actor_role=actor.role,
            metadata=metadata or {},
        )

    @staticmethod
    def list(case: Case) -> QuerySet:
        """Entries for ``case`` in the order they were recorded."""
        return (
            TimelineEntry.objects
            .filter(case=case)
            .select_related("actor")
            .order_by("created_at", "id")
        )

    @staticmethod
    def repair(case_ref, *, actor: Actor = SYSTEM_ACTOR) -> RepairReport:
        """
        Bring a case's ledger and ``current_step`` back in line.

        1. Collapse duplicate entries per stage, keeping the earliest.
        2. If no entry is left, synthesize "Report Submitted" stamped with
           the case's creation time.
        3. Set ``current_step`` to the highest stage that has an entry.

        Running it twice in a row changes nothing the second time.
        """
        require_role(actor, UserRole.ADMIN, SYSTEM_ROLE, message="Only administrators can repair timelines.")

        with atomic_write():
            case = lock_for_update(Case, **case_lookup(case_ref))
            step_before = case.current_step

            kept: dict[str, TimelineEntry] = {}
            duplicate_ids: list[int] = []
            for entry in TimelineEntry.objects.filter(case=case).order_by("created_at", "id"):
                if entry.stage in kept:
                    duplicate_ids.append(entry.pk)
                else:
                    kept[entry.stage] = entry

            removed = 0
            if duplicate_ids:
                removed, _ = TimelineEntry.objects.filter(pk__in=duplicate_ids).delete()

            synthesized = False
            if not kept:
                first = get_stage(FIRST_STEP)
                kept[first.slug] = TimelineEntry.objects.create(
                    case=case,
                    stage=first.slug,
                    label=first.label,
                    description=first.description,
                    completed_at=case.created_at,
                    created_at=case.created_at,
                    actor_id=case.reporter_id,
                    actor_role=UserRole.USER,
                    metadata={"synthesized": True},
                )
                synthesized = True

            steps = [step for step in map(_step_of, kept) if step is not None]
            step_after = max(steps) if steps else FIRST_STEP

            if step_after != step_before:
                if not compare_and_set(
                    Case,
                    pk=case.pk,
                    expected={"current_step": step_before, "version": case.version},
                    values={
                        "current_step": step_after,
                        "version": F("version") + 1,
                        "updated_at": timezone.now(),
                    },
                ):
                    raise ConcurrentTransition()

        report = RepairReport(
            case_id=case.case_id,
            removed=removed,
            synthesized=synthesized,
            step_before=step_before,
            step_after=step_after,
        )
        if report.changed:
            logger.warning(
                "Repaired timeline of case %s: removed=%d synthesized=%s step %s → %s (by %s)",
                case.case_id,
                removed,
                synthesized,
                status_for_step(step_before) if is_valid_step(step_before) else step_before,
                status_for_step(step_after),
                actor.name or actor.role,
            )
        return report

    @classmethod
    def repair_many(cls, case_refs: Iterable, *, actor: Actor = SYSTEM_ACTOR) -> list[RepairReport]:
        return [cls.repair(case_ref, actor=actor) for case_ref in case_refs]
