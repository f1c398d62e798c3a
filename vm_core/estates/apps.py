# vm_core/estates/apps.py
from django.apps import AppConfig


class EstatesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "vm_core.estates"
    label = "estates"
