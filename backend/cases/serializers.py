"""
Cases app serializers.

Contains all Request and Response serializers for the case-flow and
scammer APIs.  Serializers handle field definitions, read/write
constraints, and field-level validation only.  **No workflow logic lives
here**; stage rules belong to ``cases.workflow`` and ``cases.gateway``.

Structure
---------
1. Case read serializers (projection, status + timeline)
2. Case write serializers (submission)
3. Workflow action serializers (progress, force-progress, assign-officer)
4. Scammer serializers
. Administrator comment serializers
"""

from __future__ import annotations

import re
from typing import Any

from rest_framework import serializers

from .models import Case, CaseComment, Scammer, ScammerStatus, TimelineEntry
from .stages import STAGES

_PHONE_REGEX = re.compile(r"^\+?\d{7,15}$")


def _person_summary(user) -> dict[str, Any] | None:
    if user is None:
        return None
    return {
        "id": user.pk,
        "name": user.get_full_name() or user.username,
        "email": user.email,
    }


# ═══════════════════════════════════════════════════════════════════
#  1. Case Read Serializers
# ═══════════════════════════════════════════════════════════════════


class TimelineEntrySerializer(serializers.ModelSerializer):
    """Read-only serializer for the case audit timeline."""

    actor_name = serializers.SerializerMethodField()

    class Meta:
        model = TimelineEntry
        fields = [
            "id",
            "stage",
            "label",
            "description",
            "completed_at",
            "actor",
            "actor_name",
            "actor_role",
            "metadata",
            "created_at",
        ]
        read_only_fields = fields

    def get_actor_name(self, obj: TimelineEntry) -> str | None:
        if obj.actor is None:
            return "System" if not obj.actor_role or obj.actor_role == "system" else None
        return obj.actor.get_full_name() or obj.actor.username


class ScammerSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Scammer
        fields = ["id", "name", "phone_number", "email", "upi_id", "bank_account", "status", "total_cases"]
        read_only_fields = fields


class CaseSerializer(serializers.ModelSerializer):
    """
    The case projection returned by every case-flow endpoint.

    ``status`` / ``status_display`` are derived from ``current_step``;
    ``progress`` lists all nine stages with a ``completed`` flag so a
    client can draw the stepper without a second request.
    """

    status = serializers.CharField(read_only=True)
    status_display = serializers.CharField(read_only=True)
    case_type_display = serializers.CharField(source="get_case_type_display", read_only=True)
    reporter = serializers.SerializerMethodField()
    assigned_officer = serializers.SerializerMethodField()
    scammer = ScammerSummarySerializer(read_only=True)
    crpc_document = serializers.SerializerMethodField()
    progress = serializers.SerializerMethodField()

    class Meta:
        model = Case
        fields = [
            "id",
            "case_id",
            "case_type",
            "case_type_display",
            "description",
            "amount",
            "incident_date",
            "state",
            "city",
            "address",
            "contact_email",
            "contact_phone",
            "evidence",
            "form_data",
            "form_data_version",
            "reporter",
            "assigned_officer",
            "scammer",
            "crpc_document",
            "email_status",
            "current_step",
            "status",
            "status_display",
            "progress",
            "version",
            "last_error",
            "last_error_step",
            "last_error_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_reporter(self, obj: Case) -> dict[str, Any] | None:
        return _person_summary(obj.reporter)

    def get_assigned_officer(self, obj: Case) -> dict[str, Any] | None:
        return _person_summary(obj.assigned_officer)

    def get_crpc_document(self, obj: Case) -> dict[str, Any] | None:
        document = obj.crpc_document
        if document is None:
            return None
        return {
            "id": document.pk,
            "document_number": document.document_number,
            "status": document.status,
            "generated_at": document.generated_at,
        }

    def get_progress(self, obj: Case) -> list[dict[str, Any]]:
        return [
            {
                "step": int(stage.step),
                "status": stage.slug,
                "label": stage.label,
                "completed": stage.step <= obj.current_step,
                "current": stage.step == obj.current_step,
            }
            for stage in STAGES
        ]


class CaseStatusSerializer(CaseSerializer):
    """Case projection plus its full timeline."""

    timeline = serializers.SerializerMethodField()

    class Meta(CaseSerializer.Meta):
        fields = CaseSerializer.Meta.fields + ["timeline"]
        read_only_fields = fields

    def get_timeline(self, obj: Case) -> list[dict[str, Any]]:
        entries = self.context.get("timeline")
        if entries is None:
            entries = obj.timeline.select_related("actor").order_by("created_at", "id")
        return TimelineEntrySerializer(entries, many=True).data


# ═══════════════════════════════════════════════════════════════════
#  2. Case Write Serializers
# ═══════════════════════════════════════════════════════════════════


class ScammerInputSerializer(serializers.Serializer):
    """Scammer details as reported by the victim (all optional)."""

    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    phone_number = serializers.CharField(required=False, allow_blank=True, max_length=20)
    email = serializers.EmailField(required=False, allow_blank=True)
    upi_id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    bank_account = serializers.CharField(required=False, allow_blank=True, max_length=34)
    ifsc_code = serializers.CharField(required=False, allow_blank=True, max_length=11)
    address = serializers.CharField(required=False, allow_blank=True)

    def validate_phone_number(self, value: str) -> str:
        value = value.replace(" ", "").replace("-", "")
        if value and not _PHONE_REGEX.match(value):
            raise serializers.ValidationError("Enter a valid phone number.")
        return value


class CaseSubmitSerializer(serializers.ModelSerializer):
    """
    Request body for ``POST /api/case-flow/submit/``.

    ``form_data`` is stored untouched; the workflow never reads it.
    """

    scammer = ScammerInputSerializer(required=False)
    evidence = serializers.ListField(
        child=serializers.CharField(max_length=500),
        required=False,
        default=list,
        help_text="References to uploaded evidence files.",
    )
    form_data = serializers.JSONField(required=False, default=dict)

    class Meta:
        model = Case
        fields = [
            "case_type",
            "description",
            "amount",
            "incident_date",
            "state",
            "city",
            "address",
            "contact_email",
            "contact_phone",
            "evidence",
            "form_data",
            "form_data_version",
            "scammer",
        ]
        extra_kwargs = {
            "amount": {"min_value": 0},
        }

    def validate_description(self, value: str) -> str:
        if not value.strip():
            raise serializers.ValidationError("Describe what happened.")
        return value.strip()

    def validate_contact_phone(self, value: str) -> str:
        value = value.replace(" ", "").replace("-", "")
        if value and not _PHONE_REGEX.match(value):
            raise serializers.ValidationError("Enter a valid phone number.")
        return value

    def validate_form_data(self, value: Any) -> dict:
        if not isinstance(value, dict):
            raise serializers.ValidationError("form_data must be a JSON object.")
        return value


# ═══════════════════════════════════════════════════════════════════
#  3. Workflow Action Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseProgressSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/case-flow/{case_id}/progress/``.

    ``step`` is not range-checked here; out-of-range targets are rejected
    by the engine as ``invalid_transition``.
    """

    step = serializers.IntegerField(help_text="Target step (current step + 1).")
    note = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    officer = serializers.IntegerField(
        required=False,
        allow_null=True,
        default=None,
        help_text="Police officer PK; used when moving to step 6.",
    )
    details = serializers.DictField(required=False, default=dict)


class CaseForceProgressSerializer(serializers.Serializer):
    """Request body for ``POST /api/case-flow/{case_id}/force-progress/``."""

    step = serializers.IntegerField(help_text="Target step, strictly ahead of the current one.")
    justification = serializers.CharField(max_length=2000)
    officer = serializers.IntegerField(required=False, allow_null=True, default=None)


class AssignOfficerSerializer(serializers.Serializer):
    officer = serializers.IntegerField(help_text="PK of an active police officer.")


# ═══════════════════════════════════════════════════════════════════
#  4. Scammer Serializers
# ═══════════════════════════════════════════════════════════════════


class ScammerSerializer(serializers.ModelSerializer):
    """Full registry record with the ids of linked cases."""

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    case_ids = serializers.SerializerMethodField()

    class Meta:
        model = Scammer
        fields = [
            "id",
            "name",
            "phone_number",
            "email",
            "upi_id",
            "bank_account",
            "ifsc_code",
            "address",
            "total_cases",
            "total_amount",
            "status",
            "status_display",
            "first_seen",
            "last_seen",
            "case_ids",
        ]
        read_only_fields = fields

    def get_case_ids(self, obj: Scammer) -> list[str]:
        return list(obj.cases.order_by("created_at").values_list("case_id", flat=True))


class ScammerStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ScammerStatus.choices)


# ═══════════════════════════════════════════════════════════════════
#  5. Maintenance Serializers
# ═══════════════════════════════════════════════════════════════════


class RepairReportSerializer(serializers.Serializer):
    case_id = serializers.CharField()
    removed = serializers.IntegerField()
    synthesized = serializers.BooleanField()
    step_before = serializers.IntegerField()
    step_after = serializers.IntegerField()
    changed = serializers.BooleanField()


# ═══════════════════════════════════════════════════════════════════
#  6. Administrator Comment Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseCommentSerializer(serializers.ModelSerializer):
    class Meta:
        model = CaseComment
        fields = ["id", "author", "author_name", "body", "created_at"]
        read_only_fields = fields


class CaseCommentCreateSerializer(serializers.Serializer):
    comment = serializers.CharField(max_length=5000)
