from django.contrib import admin

from .models import Case, CaseComment, Scammer, StageOverride, TimelineEntry


class TimelineEntryInline(admin.TabularInline):
    model = TimelineEntry
    extra = 0
    can_delete = False
    readonly_fields = ("stage", "label", "description", "actor",
                       "actor_role", "metadata", "created_at")


class CaseCommentInline(admin.TabularInline):
    model = CaseComment
    extra = 0
    readonly_fields = ("author", "author_name", "created_at")
    fields = ("body", "author_name", "created_at")


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    list_display = ("case_id", "case_type", "current_step", "reporter",
                    "assigned_officer", "last_error_step", "created_at")
    list_filter = ("current_step", "case_type")
    search_fields = ("case_id", "description", "reporter__email")
    # Stage changes go through the workflow engine only.
    readonly_fields = ("case_id", "current_step", "version", "crpc_document",
                       "email_status", "last_error", "last_error_step",
                       "last_error_at")
    inlines = [TimelineEntryInline, CaseCommentInline]


@admin.register(Scammer)
class ScammerAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "phone_number", "upi_id", "status",
                    "total_cases", "total_amount", "last_seen")
    list_filter = ("status",)
    search_fields = ("name", "phone_number", "email", "upi_id", "bank_account")


@admin.register(StageOverride)
class StageOverrideAdmin(admin.ModelAdmin):
    list_display = ("case", "from_step", "to_step", "actor", "created_at")
    readonly_fields = ("case", "from_step", "to_step", "skipped_steps",
                       "actor", "justification", "created_at")
