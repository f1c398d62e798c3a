# vm_core/access_codes/apps.py
from django.apps import AppConfig


class AccessCodesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "vm_core.access_codes"
    label = "access_codes"
