"""
CRPC app serializers (response-only).
"""

from __future__ import annotations

from django.urls import reverse
from rest_framework import serializers

from .models import CRPCDocument


class CRPCDocumentSerializer(serializers.ModelSerializer):
    """Notice metadata, its content, and a link to the text download."""

    case_id = serializers.CharField(source="case.case_id", read_only=True)
    generated_by = serializers.SerializerMethodField()
    download_url = serializers.SerializerMethodField()

    class Meta:
        model = CRPCDocument
        fields = [
            "id",
            "document_number",
            "case_id",
            "status",
            "generated_at",
            "generated_by",
            "content",
            "recipients",
            "download_url",
        ]
        read_only_fields = fields

    def get_generated_by(self, obj: CRPCDocument) -> str | None:
        user = obj.generated_by
        if user is None:
            return None
        return user.get_full_name() or user.username

    def get_download_url(self, obj: CRPCDocument) -> str:
        url = reverse("crpc:crpc-download", kwargs={"document_id": obj.pk})
        request = self.context.get("request")
        return request.build_absolute_uri(url) if request else url
