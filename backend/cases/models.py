"""
Cases app models.

Covers the fraud-case lifecycle: the citizen's report, its audit
timeline, internal administrator comments, the scammer registry built
from reports, and the audit rows written when an administrator forces a
case past skipped stages.

A case stores only ``current_step``.  The status slug and its label are
derived through ``cases.stages`` on every read.
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.models import TimeStampedModel

from .stages import STATUS_CHOICES, CaseStage, label_for_step, status_for_step


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class CaseType(models.TextChoices):
    """Scam categories a citizen can report."""

    UPI_FRAUD = "upi-fraud", "UPI Fraud"
    INVESTMENT_SCAM = "investment-scam", "Investment Scam"
    PHISHING = "phishing", "Phishing"
    FAKE_CALLS = "fake-calls", "Fake Calls"
    JOB_SCAM = "job-scam", "Job Scam"
    OTHER = "other", "Other"


class ScammerStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    UNDER_INVESTIGATION = "under_investigation", "Under Investigation"
    BLOCKED = "blocked", "Blocked"


def case_lookup(case_ref) -> dict:
    """
    Build ORM lookup kwargs for a case reference.

    Accepts a ``Case`` instance, an integer primary key (or its string
    form), or a human-readable ``case_id``.
    """
    if isinstance(case_ref, Case):
        return {"pk": case_ref.pk}
    if isinstance(case_ref, int) or str(case_ref).isdigit():
        return {"pk": int(case_ref)}
    return {"case_id": str(case_ref).strip().upper()}


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Scammer(TimeStampedModel):
    """
    A suspected fraudster, merged across reports.

    Two reports refer to the same scammer when any one identifying field
    (phone number, e-mail, UPI id, bank account) matches.
    """

    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Name",
    )
    phone_number = models.CharField(
        max_length=20,
        blank=True,
        default="",
        db_index=True,
        verbose_name="Phone Number",
    )
    email = models.EmailField(
        blank=True,
        default="",
        db_index=True,
        verbose_name="Email",
    )
    upi_id = models.CharField(
        max_length=100,
        blank=True,
        default="",
        db_index=True,
        verbose_name="UPI ID",
    )
    bank_account = models.CharField(
        max_length=34,
        blank=True,
        default="",
        db_index=True,
        verbose_name="Bank Account",
    )
    ifsc_code = models.CharField(
        max_length=11,
        blank=True,
        default="",
        verbose_name="IFSC Code",
    )
    address = models.TextField(
        blank=True,
        default="",
        verbose_name="Address",
    )
    total_cases = models.PositiveIntegerField(
        default=0,
        verbose_name="Total Cases",
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=0,
        verbose_name="Total Amount",
    )
    status = models.CharField(
        max_length=20,
        choices=ScammerStatus.choices,
        default=ScammerStatus.ACTIVE,
        db_index=True,
        verbose_name="Status",
    )
    first_seen = models.DateTimeField(auto_now_add=True, verbose_name="First Seen")
    last_seen = models.DateTimeField(verbose_name="Last Seen")

    class Meta:
        db_table = "scammers"
        verbose_name = "Scammer"
        verbose_name_plural = "Scammers"
        ordering = ["-last_seen"]

    def __str__(self):
        identifier = self.phone_number or self.email or self.upi_id or self.bank_account
        return f"{self.name or 'Unknown'} ({identifier or 'no identifier'})"


class Case(TimeStampedModel):
    """
    Central entity of the system — a reported fraud incident.

    ``case_id`` is the human-readable reference shown to citizens and
    quoted in notices (``FRD-482913-QX7A``); ``id`` stays the internal key.
    """

    case_id = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        verbose_name="Case ID",
    )
    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reported_cases",
        verbose_name="Reporter",
    )

    # ── Incident ────────────────────────────────────────────────────
    case_type = models.CharField(
        max_length=20,
        choices=CaseType.choices,
        verbose_name="Case Type",
        db_index=True,
    )
    description = models.TextField(verbose_name="Description")
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)],
        verbose_name="Amount Lost",
    )
    incident_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="Incident Date",
    )
    state = models.CharField(max_length=100, blank=True, default="", verbose_name="State")
    city = models.CharField(max_length=100, blank=True, default="", verbose_name="City")
    address = models.TextField(blank=True, default="", verbose_name="Address")
    contact_email = models.EmailField(blank=True, default="", verbose_name="Contact Email")
    contact_phone = models.CharField(max_length=20, blank=True, default="", verbose_name="Contact Phone")
    evidence = models.JSONField(
        default=list,
        blank=True,
        verbose_name="Evidence References",
        help_text="List of references to uploaded evidence files.",
    )

    # ── Opaque multi-step form payload ──────────────────────────────
    form_data = models.JSONField(default=dict, blank=True, verbose_name="Form Data")
    form_data_version = models.PositiveSmallIntegerField(default=1, verbose_name="Form Data Version")

    # ── Links ───────────────────────────────────────────────────────
    scammer = models.ForeignKey(
        Scammer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cases",
        verbose_name="Scammer",
    )
    assigned_officer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_cases",
        verbose_name="Assigned Officer",
    )
    crpc_document = models.ForeignKey(
        "crpc.CRPCDocument",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="91CRPC Document",
    )
    email_status = models.JSONField(
        default=dict,
        blank=True,
        verbose_name="Authority Email Status",
    )

    # ── Lifecycle ───────────────────────────────────────────────────
    current_step = models.PositiveSmallIntegerField(
        choices=CaseStage.choices,
        default=CaseStage.SUBMITTED,
        db_index=True,
        verbose_name="Current Step",
    )
    version = models.PositiveIntegerField(
        default=1,
        verbose_name="Version",
        help_text="Bumped on every lifecycle write.",
    )

    # ── Most recent side-effect failure ─────────────────────────────
    last_error = models.TextField(blank=True, default="", verbose_name="Last Error")
    last_error_step = models.PositiveSmallIntegerField(null=True, blank=True, verbose_name="Last Error Step")
    last_error_at = models.DateTimeField(null=True, blank=True, verbose_name="Last Error At")

    class Meta:
        db_table = "cases"
        verbose_name = "Case"
        verbose_name_plural = "Cases"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["reporter", "current_step"], name="cases_reporter_step_idx"),
            models.Index(fields=["assigned_officer", "current_step"], name="cases_officer_step_idx"),
        ]

    def __str__(self):
        return f"{self.case_id} ({self.status})"

    @property
    def status(self) -> str:
        return status_for_step(self.current_step)

    @property
    def status_display(self) -> str:
        return label_for_step(self.current_step)

    @property
    def is_closed(self) -> bool:
        return self.current_step == CaseStage.CLOSED


class TimelineEntry(models.Model):
    """
    One completed stage of a case.

    At most one entry exists per ``(case, stage)``; the ledger checks this
    while holding the case row lock.  Entries are never edited, only
    collapsed by ``TimelineLedger.repair``.
    """

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="timeline",
        verbose_name="Case",
    )
    stage = models.CharField(
        max_length=30,
        choices=STATUS_CHOICES,
        verbose_name="Stage",
    )
    label = models.CharField(max_length=100, verbose_name="Label")
    description = models.TextField(blank=True, default="", verbose_name="Description")
    completed_at = models.DateTimeField(verbose_name="Completed At")
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Actor",
    )
    actor_role = models.CharField(max_length=10, blank=True, default="", verbose_name="Actor Role")
    metadata = models.JSONField(default=dict, blank=True, verbose_name="Metadata")
    created_at = models.DateTimeField(verbose_name="Created At", db_index=True)

    class Meta:
        db_table = "case_timeline"
        verbose_name = "Timeline Entry"
        verbose_name_plural = "Timeline Entries"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["case", "stage"], name="case_timeline_stage_idx"),
        ]

    def __str__(self):
        return f"{self.case_id}: {self.stage} @ {self.completed_at:%Y-%m-%d %H:%M}"


class StageOverride(models.Model):
    """Audit row written whenever an admin forces a case ahead."""

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="stage_overrides",
        verbose_name="Case",
    )
    from_step = models.PositiveSmallIntegerField(verbose_name="From Step")
    to_step = models.PositiveSmallIntegerField(verbose_name="To Step")
    skipped_steps = models.JSONField(default=list, verbose_name="Skipped Steps")
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
        verbose_name="Actor",
    )
    justification = models.TextField(verbose_name="Justification")
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Created At")

    class Meta:
        db_table = "case_stage_overrides"
        verbose_name = "Stage Override"
        verbose_name_plural = "Stage Overrides"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.case_id}: {self.from_step} → {self.to_step}"


class CaseComment(TimeStampedModel):
    """Internal note an administrator attaches to a case."""

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="comments",
        verbose_name="Case",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="+",
        verbose_name="Author",
    )
    author_name = models.CharField(max_length=150, blank=True, default="", verbose_name="Author Name")
    body = models.TextField(verbose_name="Comment")

    class Meta:
        db_table = "case_comments"
        verbose_name = "Case Comment"
        verbose_name_plural = "Case Comments"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.case_id}: comment by {self.author_name or 'admin'}"
