# vm_core/estates/admin.py
from django.contrib import admin

from vm_core.estates.models import Estate, Home


@admin.register(Estate)
class EstateAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")
    ordering = ("name",)


@admin.register(Home)
class HomeAdmin(admin.ModelAdmin):
    list_display = ("name", "plot_number", "street", "estate", "is_active")
    list_filter = ("estate", "is_active")
    search_fields = ("name", "plot_number", "street")
    list_select_related = ("estate",)
    ordering = ("estate", "plot_number")
