# vm_core/gate/filters.py
from __future__ import annotations

import django_filters

from vm_core.gate.models import EntryLog, EntryResult


class EntryLogFilter(django_filters.FilterSet):
    """
    Admin entry-log filters. Dates are site-local calendar days.
    """
    result = django_filters.ChoiceFilter(choices=EntryResult.choices)
    resident_id = django_filters.NumberFilter(field_name="resident_id")
    home_id = django_filters.UUIDFilter(field_name="resident__estate_membership__home")
    from_date = django_filters.DateFilter(field_name="validated_at", lookup_expr="date__gte")
    to_date = django_filters.DateFilter(field_name="validated_at", lookup_expr="date__lte")

    class Meta:
        model = EntryLog
        fields = ["result", "resident_id", "home_id", "from_date", "to_date"]
