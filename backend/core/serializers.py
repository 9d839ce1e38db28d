"""
Core app serializers.

**Response-only** serializers for the aggregated endpoints served by the
core app.  They define the *output schema* for the dashboard and system
constants views and work exclusively with plain dicts produced by the
service layer, so ``core`` never imports models from ``cases`` or
``crpc`` here.
"""

from __future__ import annotations

from rest_framework import serializers


# ════════════════════════════════════════════════════════════════════
#  Dashboard Statistics
# ════════════════════════════════════════════════════════════════════

class CasesByStageSerializer(serializers.Serializer):
    """
    Case count for one workflow stage.

    Example::

        {"step": 4, "status": "emails_sent", "label": "Email Sent", "count": 7}
    """

    step = serializers.IntegerField(help_text="Stage number (1-9).")
    status = serializers.CharField(help_text="Stage slug.")
    label = serializers.CharField(help_text="Human-readable stage label.")
    count = serializers.IntegerField(help_text="Number of cases currently at this stage.")


class RecentActivitySerializer(serializers.Serializer):
    """A single timeline entry in the dashboard feed."""

    timestamp = serializers.DateTimeField(help_text="When the stage was completed.")
    case_id = serializers.CharField(help_text="Human-readable case reference.")
    stage = serializers.CharField(help_text="Stage slug.")
    label = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    actor = serializers.CharField(
        help_text="Who completed the stage (null for system entries).",
        allow_null=True,
        allow_blank=True,
    )


class DashboardStatsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/dashboard/``.

    Counts are scoped like the case list: administrators see every case,
    police see their assigned cases, citizens see their own reports.

    Response shape::

        {
            "total_cases": 150,
            "open_cases": 42,
            "closed_cases": 108,
            "stuck_cases": 3,
            "total_amount": "1250000.00",
            "cases_by_stage": [...],
            "recent_activity": [...]
        }
    """

    total_cases = serializers.IntegerField(help_text="Total number of visible cases.")
    open_cases = serializers.IntegerField(help_text="Cases not yet closed.")
    closed_cases = serializers.IntegerField(help_text="Cases at the terminal stage.")
    stuck_cases = serializers.IntegerField(
        help_text="Cases whose last advance failed in a side effect (last_error set).",
    )
    total_amount = serializers.DecimalField(
        max_digits=16,
        decimal_places=2,
        help_text="Sum of reported losses.",
    )
    cases_by_stage = CasesByStageSerializer(many=True)
    recent_activity = RecentActivitySerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  System Constants / Enums
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "upi-fraud", "label": "UPI Fraud"}
    """

    value = serializers.CharField(help_text="Machine-readable value to send in API requests.")
    label = serializers.CharField(help_text="Human-readable display label for the UI.")


class StageItemSerializer(serializers.Serializer):
    step = serializers.IntegerField()
    status = serializers.CharField()
    label = serializers.CharField()
    description = serializers.CharField()
    roles = serializers.ListField(child=serializers.CharField())
    requires_assignment = serializers.BooleanField(
        help_text="Only the case's assigned officer may complete this stage.",
    )


class SystemConstantsSerializer(serializers.Serializer):
    """Top-level response serializer for ``GET /api/core/constants/``."""

    stages = StageItemSerializer(many=True, help_text="The nine workflow stages in order.")
    case_types = ChoiceItemSerializer(many=True)
    user_roles = ChoiceItemSerializer(many=True)
    scammer_statuses = ChoiceItemSerializer(many=True)
    crpc_document_statuses = ChoiceItemSerializer(many=True)
    crpc_compliance_hours = serializers.IntegerField(
        help_text="Compliance window quoted in 91CRPC notices.",
    )
