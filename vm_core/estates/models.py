# vm_core/estates/models.py
from __future__ import annotations

import uuid

from django.db import models


class Estate(models.Model):
    """
    Top-level organization (a gated estate).
    Root of all scoping in the system.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64, unique=True)
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "estates_estate"
        indexes = [
            models.Index(fields=["code"], name="estate_code_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class Home(models.Model):
    """
    A plot/house inside an estate. Residents belong to exactly one home.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    estate = models.ForeignKey(Estate, on_delete=models.PROTECT, related_name="homes")

    name = models.CharField(max_length=255)
    plot_number = models.CharField(max_length=50)  # unique per estate
    street = models.CharField(max_length=255)

    contact_email = models.EmailField(blank=True, default="")
    contact_phone = models.CharField(max_length=20, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "estates_home"
        constraints = [
            models.UniqueConstraint(fields=["estate", "plot_number"], name="uq_home_estate_plot"),
        ]
        indexes = [
            models.Index(fields=["estate", "is_active"], name="home_estate_active_idx"),
        ]

    @property
    def address_line(self) -> str:
        return f"{self.plot_number}, {self.street}"

    def __str__(self) -> str:
        return f"{self.name} ({self.address_line})"
