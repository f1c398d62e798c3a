# vm_core/access_codes/admin.py
from django.contrib import admin

from vm_core.access_codes.models import AccessCode


@admin.register(AccessCode)
class AccessCodeAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "visit_date",
        "start_time",
        "end_time",
        "status",
        "visitor_name",
        "resident",
        "estate_id",
        "created_at",
    )
    list_filter = ("status", "visit_date", "estate_id")
    search_fields = ("code", "visitor_name", "resident__username")
    list_select_related = ("resident",)
    # Lifecycle fields only move through the services.
    readonly_fields = (
        "code",
        "visit_date",
        "start_time",
        "end_time",
        "status",
        "qr_code_data",
        "used_at",
        "cancelled_at",
        "expired_at",
        "created_at",
        "updated_at",
    )
    ordering = ("-visit_date", "-created_at")

    def has_add_permission(self, request):
        # Codes are issued through AccessCodeService.create_code only.
        return False
