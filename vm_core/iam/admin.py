# vm_core/iam/admin.py
from django.contrib import admin

from vm_core.iam.models import EstateMembership


@admin.register(EstateMembership)
class EstateMembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "estate", "home", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "estate")
    search_fields = ("user__username", "user__email", "user__first_name", "user__last_name")
    list_select_related = ("user", "estate", "home")
    readonly_fields = ("created_at", "updated_at")
