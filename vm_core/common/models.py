# vm_core/common/models.py
from __future__ import annotations

import uuid
from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class EstateScopedModel(TimeStampedModel):
    """
    Rows that belong to one estate.
    The estate is stored as a plain UUID column so reads never need a join.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    estate_id = models.UUIDField(db_index=True)

    class Meta:
        abstract = True
