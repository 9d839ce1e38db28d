"""
CRPC app models.

A ``CRPCDocument`` is the Section 91 CrPC notice generated for a case
before the authorities are e-mailed.  The notice body is stored as JSON
so it can be re-rendered (plain text today) without regenerating it.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class CRPCDocument(TimeStampedModel):
    """A generated Section 91 CrPC notice and its delivery outcome."""

    class Status(models.TextChoices):
        GENERATED = "generated", "Generated"
        SENT = "sent", "Sent"
        PARTIALLY_SENT = "partially_sent", "Partially Sent"
        FAILED = "failed", "Failed"

    case = models.ForeignKey(
        "cases.Case",
        on_delete=models.CASCADE,
        related_name="crpc_documents",
        verbose_name="Case",
    )
    document_number = models.CharField(
        max_length=40,
        unique=True,
        verbose_name="Document Number",
        help_text="Format: 91CRPC/YYYYMMDD/NNNNNN",
    )
    generated_at = models.DateTimeField(verbose_name="Generated At")
    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Generated By",
    )
    content = models.JSONField(default=dict, verbose_name="Content")
    recipients = models.JSONField(
        default=dict,
        verbose_name="Recipients",
        help_text="category → {email, status, sent_at, error}",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.GENERATED,
        db_index=True,
        verbose_name="Status",
    )

    class Meta:
        db_table = "crpc_documents"
        verbose_name = "91CRPC Document"
        verbose_name_plural = "91CRPC Documents"
        ordering = ["-generated_at"]

    def __str__(self):
        return self.document_number
