from django.contrib import admin

from .models import CRPCDocument


@admin.register(CRPCDocument)
class CRPCDocumentAdmin(admin.ModelAdmin):
    list_display = ("document_number", "case", "status", "generated_at", "generated_by")
    list_filter = ("status",)
    search_fields = ("document_number", "case__case_id")
    readonly_fields = ("document_number", "case", "generated_at", "generated_by",
                       "content", "recipients", "status")
