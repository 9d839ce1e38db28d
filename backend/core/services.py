"""
Core app services — **Service Layer**.

Cross-app aggregation for the dashboard and the public constants
endpoint.  Views delegate to the classes defined here.

Models from other apps are loaded lazily (``apps.get_model`` or a
function-level import) so ``core`` never imports them at module load;
``cases`` and ``crpc`` both depend on ``core`` and a module-level import
would be circular.
"""

from __future__ import annotations

from typing import Any

from django.apps import apps
from django.conf import settings
from django.db.models import Count, Q, QuerySet, Sum

from core.domain.access import Actor


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces the statistics dict consumed by ``DashboardStatsSerializer``.

    The statistics are **role-aware** and use the same scope as the case
    list:

    * **Administrator**: every case.
    * **Police officer**: cases assigned to them.
    * **Citizen**: their own reports.
    """

    #: Maximum number of recent timeline entries to return.
    RECENT_ACTIVITY_LIMIT: int = 20

    def __init__(self, actor: Actor) -> None:
        self.actor = actor

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return the full dashboard statistics dictionary."""
        from cases.stages import TERMINAL_STEP

        case_qs = self._get_case_queryset()

        aggregates = case_qs.aggregate(
            total_cases=Count("id"),
            open_cases=Count("id", filter=Q(current_step__lt=TERMINAL_STEP)),
            closed_cases=Count("id", filter=Q(current_step=TERMINAL_STEP)),
            stuck_cases=Count("id", filter=~Q(last_error="")),
            total_amount=Sum("amount"),
        )

        return {
            "total_cases": aggregates["total_cases"],
            "open_cases": aggregates["open_cases"],
            "closed_cases": aggregates["closed_cases"],
            "stuck_cases": aggregates["stuck_cases"],
            "total_amount": aggregates["total_amount"] or 0,
            "cases_by_stage": self._get_cases_by_stage(case_qs),
            "recent_activity": self._get_recent_activity(case_qs),
        }

    # ── Private helpers ─────────────────────────────────────────────

    def _get_case_queryset(self) -> QuerySet:
        """Return a ``Case`` queryset scoped to the requesting actor."""
        from cases.services import CaseQueryService

        Case = apps.get_model("cases", "Case")
        return CaseQueryService.scope_for_actor(Case.objects.all(), self.actor)

    def _get_cases_by_stage(self, case_qs: QuerySet) -> list[dict[str, Any]]:
        """Count cases per stage, listing every stage even when empty."""
        from cases.stages import STAGES

        counts = dict(
            case_qs
            .order_by()
            .values_list("current_step")
            .annotate(count=Count("id"))
        )
        return [
            {
                "step": int(stage.step),
                "status": stage.slug,
                "label": stage.label,
                "count": counts.get(int(stage.step), 0),
            }
            for stage in STAGES
        ]

    def _get_recent_activity(self, case_qs: QuerySet) -> list[dict[str, Any]]:
        """Return the latest timeline entries of the visible cases."""
        TimelineEntry = apps.get_model("cases", "TimelineEntry")

        entries = (
            TimelineEntry.objects
            .filter(case__in=case_qs)
            .select_related("case", "actor")
            .order_by("-created_at", "-id")[: self.RECENT_ACTIVITY_LIMIT]
        )
        return [
            {
                "timestamp": entry.created_at,
                "case_id": entry.case.case_id,
                "stage": entry.stage,
                "label": entry.label,
                "description": entry.description,
                "actor": (
                    entry.actor.get_full_name() or entry.actor.username
                    if entry.actor else None
                ),
            }
            for entry in entries
        ]


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers the system-wide enumerations the frontend needs to render
    the stage stepper, dropdowns and labels.

    Stateless and public: nothing here depends on the requesting user.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import UserRole
        from cases.models import CaseType, ScammerStatus
        from cases.stages import STAGES
        from crpc.models import CRPCDocument

        to_list = SystemConstantsService._choices_to_list

        return {
            "stages": [
                {
                    "step": int(stage.step),
                    "status": stage.slug,
                    "label": stage.label,
                    "description": stage.description,
                    "roles": list(stage.roles),
                    "requires_assignment": stage.requires_assignment,
                }
                for stage in STAGES
            ],
            "case_types": to_list(CaseType),
            "user_roles": to_list(UserRole),
            "scammer_statuses": to_list(ScammerStatus),
            "crpc_document_statuses": to_list(CRPCDocument.Status),
            "crpc_compliance_hours": settings.FRAUDLENS["CRPC_COMPLIANCE_HOURS"],
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
