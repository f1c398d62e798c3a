# vm_core/gate/admin.py
from django.contrib import admin

from vm_core.gate.models import EntryLog


@admin.register(EntryLog)
class EntryLogAdmin(admin.ModelAdmin):
    list_display = (
        "submitted_code",
        "result",
        "reason_code",
        "gate",
        "security",
        "resident",
        "estate_id",
        "validated_at",
    )
    list_filter = ("result", "reason_code", "gate", "estate_id")
    search_fields = ("submitted_code", "reason")
    list_select_related = ("security", "resident")
    ordering = ("-validated_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
