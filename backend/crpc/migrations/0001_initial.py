import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("cases", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CRPCDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                (
                    "document_number",
                    models.CharField(
                        help_text="Format: 91CRPC/YYYYMMDD/NNNNNN",
                        max_length=40,
                        unique=True,
                        verbose_name="Document Number",
                    ),
                ),
                ("generated_at", models.DateTimeField(verbose_name="Generated At")),
                ("content", models.JSONField(default=dict, verbose_name="Content")),
                (
                    "recipients",
                    models.JSONField(
                        default=dict,
                        help_text="category → {email, status, sent_at, error}",
                        verbose_name="Recipients",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("generated", "Generated"),
                            ("sent", "Sent"),
                            ("partially_sent", "Partially Sent"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="generated",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "case",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="crpc_documents",
                        to="cases.case",
                        verbose_name="Case",
                    ),
                ),
                (
                    "generated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Generated By",
                    ),
                ),
            ],
            options={
                "verbose_name": "91CRPC Document",
                "verbose_name_plural": "91CRPC Documents",
                "db_table": "crpc_documents",
                "ordering": ["-generated_at"],
            },
        ),
    ]
