# vm_core/gate/apps.py
from django.apps import AppConfig


class GateConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "vm_core.gate"
    label = "gate"
