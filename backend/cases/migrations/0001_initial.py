import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STAGE_STEPS = [
    (1, "Report Submitted"),
    (2, "Information Verified"),
    (3, "91CRPC Generated"),
    (4, "Email Sent"),
    (5, "Authorized"),
    (6, "Assigned to Police"),
    (7, "Evidence Collected"),
    (8, "Resolved"),
    (9, "Case Closed"),
]

STAGE_SLUGS = [
    ("submitted", "Report Submitted"),
    ("verified", "Information Verified"),
    ("crpc_generated", "91CRPC Generated"),
    ("emails_sent", "Email Sent"),
    ("authorized", "Authorized"),
    ("assigned_to_police", "Assigned to Police"),
    ("evidence_collected", "Evidence Collected"),
    ("resolved", "Resolved"),
    ("closed", "Case Closed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Scammer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("name", models.CharField(blank=True, default="", max_length=255, verbose_name="Name")),
                ("phone_number", models.CharField(blank=True, db_index=True, default="", max_length=20, verbose_name="Phone Number")),
                ("email", models.EmailField(blank=True, db_index=True, default="", max_length=254, verbose_name="Email")),
                ("upi_id", models.CharField(blank=True, db_index=True, default="", max_length=100, verbose_name="UPI ID")),
                ("bank_account", models.CharField(blank=True, db_index=True, default="", max_length=34, verbose_name="Bank Account")),
                ("ifsc_code", models.CharField(blank=True, default="", max_length=11, verbose_name="IFSC Code")),
                ("address", models.TextField(blank=True, default="", verbose_name="Address")),
                ("total_cases", models.PositiveIntegerField(default=0, verbose_name="Total Cases")),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=14, verbose_name="Total Amount")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("under_investigation", "Under Investigation"),
                            ("blocked", "Blocked"),
                        ],
                        db_index=True,
                        default="active",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                ("first_seen", models.DateTimeField(auto_now_add=True, verbose_name="First Seen")),
                ("last_seen", models.DateTimeField(verbose_name="Last Seen")),
            ],
            options={
                "verbose_name": "Scammer",
                "verbose_name_plural": "Scammers",
                "db_table": "scammers",
                "ordering": ["-last_seen"],
            },
        ),
        migrations.CreateModel(
            name="Case",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("case_id", models.CharField(editable=False, max_length=20, unique=True, verbose_name="Case ID")),
                (
                    "case_type",
                    models.CharField(
                        choices=[
                            ("upi-fraud", "UPI Fraud"),
                            ("investment-scam", "Investment Scam"),
                            ("phishing", "Phishing"),
                            ("fake-calls", "Fake Calls"),
                            ("job-scam", "Job Scam"),
                            ("other", "Other"),
                        ],
                        db_index=True,
                        max_length=20,
                        verbose_name="Case Type",
                    ),
                ),
                ("description", models.TextField(verbose_name="Description")),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="Amount Lost",
                    ),
                ),
                ("incident_date", models.DateField(blank=True, null=True, verbose_name="Incident Date")),
                ("state", models.CharField(blank=True, default="", max_length=100, verbose_name="State")),
                ("city", models.CharField(blank=True, default="", max_length=100, verbose_name="City")),
                ("address", models.TextField(blank=True, default="", verbose_name="Address")),
                ("contact_email", models.EmailField(blank=True, default="", max_length=254, verbose_name="Contact Email")),
                ("contact_phone", models.CharField(blank=True, default="", max_length=20, verbose_name="Contact Phone")),
                (
                    "evidence",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="List of references to uploaded evidence files.",
                        verbose_name="Evidence References",
                    ),
                ),
                ("form_data", models.JSONField(blank=True, default=dict, verbose_name="Form Data")),
                ("form_data_version", models.PositiveSmallIntegerField(default=1, verbose_name="Form Data Version")),
                ("email_status", models.JSONField(blank=True, default=dict, verbose_name="Authority Email Status")),
                (
                    "current_step",
                    models.PositiveSmallIntegerField(
                        choices=STAGE_STEPS,
                        db_index=True,
                        default=1,
                        verbose_name="Current Step",
                    ),
                ),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Bumped on every lifecycle write.",
                        verbose_name="Version",
                    ),
                ),
                ("last_error", models.TextField(blank=True, default="", verbose_name="Last Error")),
                ("last_error_step", models.PositiveSmallIntegerField(blank=True, null=True, verbose_name="Last Error Step")),
                ("last_error_at", models.DateTimeField(blank=True, null=True, verbose_name="Last Error At")),
                (
                    "reporter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reported_cases",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Reporter",
                    ),
                ),
                (
                    "scammer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="cases",
                        to="cases.scammer",
                        verbose_name="Scammer",
                    ),
                ),
                (
                    "assigned_officer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_cases",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Assigned Officer",
                    ),
                ),
            ],
            options={
                "verbose_name": "Case",
                "verbose_name_plural": "Cases",
                "db_table": "cases",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["reporter", "current_step"], name="cases_reporter_step_idx"),
                    models.Index(fields=["assigned_officer", "current_step"], name="cases_officer_step_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="TimelineEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("stage", models.CharField(choices=STAGE_SLUGS, max_length=30, verbose_name="Stage")),
                ("label", models.CharField(max_length=100, verbose_name="Label")),
                ("description", models.TextField(blank=True, default="", verbose_name="Description")),
                ("completed_at", models.DateTimeField(verbose_name="Completed At")),
                ("actor_role", models.CharField(blank=True, default="", max_length=10, verbose_name="Actor Role")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="Metadata")),
                ("created_at", models.DateTimeField(db_index=True, verbose_name="Created At")),
                (
                    "case",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="timeline",
                        to="cases.case",
                        verbose_name="Case",
                    ),
                ),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Actor",
                    ),
                ),
            ],
            options={
                "verbose_name": "Timeline Entry",
                "verbose_name_plural": "Timeline Entries",
                "db_table": "case_timeline",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["case", "stage"], name="case_timeline_stage_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StageOverride",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_step", models.PositiveSmallIntegerField(verbose_name="From Step")),
                ("to_step", models.PositiveSmallIntegerField(verbose_name="To Step")),
                ("skipped_steps", models.JSONField(default=list, verbose_name="Skipped Steps")),
                ("justification", models.TextField(verbose_name="Justification")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                (
                    "case",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stage_overrides",
                        to="cases.case",
                        verbose_name="Case",
                    ),
                ),
                (
                    "actor",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Actor",
                    ),
                ),
            ],
            options={
                "verbose_name": "Stage Override",
                "verbose_name_plural": "Stage Overrides",
                "db_table": "case_stage_overrides",
                "ordering": ["-created_at"],
            },
        ),
    ]
