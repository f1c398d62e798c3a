# vm_core/gate/selectors.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import Count, Q, QuerySet

from vm_core.access_codes.selectors import AccessCodeSelector
from vm_core.common.clock import read_clock
from vm_core.estates.models import Home
from vm_core.gate.filters import EntryLogFilter
from vm_core.gate.models import EntryLog, EntryResult
from vm_core.iam.models import EstateMembership, MembershipRole

RECENT_DEFAULT_LIMIT = 50
RECENT_MAX_LIMIT = 200
DASHBOARD_ACTIVITY_LIMIT = 10


def _with_people(qs: QuerySet[EntryLog]) -> QuerySet[EntryLog]:
    return qs.select_related(
        "access_code",
        "security",
        "resident",
        "resident__estate_membership__home",
    )


class EntryLogSelector:
    @staticmethod
    def recent_for_security(*, security_id: int, limit: int = RECENT_DEFAULT_LIMIT) -> QuerySet[EntryLog]:
        limit = max(1, min(int(limit), RECENT_MAX_LIMIT))
        return _with_people(EntryLog.objects.filter(security_id=security_id)).order_by("-validated_at")[:limit]

    @staticmethod
    def resident_history(
        *,
        resident_id: int,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> QuerySet[EntryLog]:
        """
        Granted entries only: the resident's actual visitors.
        """
        qs = EntryLog.objects.filter(resident_id=resident_id, result=EntryResult.GRANTED)
        if from_date:
            qs = qs.filter(validated_at__date__gte=from_date)
        if to_date:
            qs = qs.filter(validated_at__date__lte=to_date)
        return _with_people(qs).order_by("-validated_at")

    @staticmethod
    def estate_logs(*, estate_id: Optional[UUID], params: Any) -> QuerySet[EntryLog]:
        """
        estate_id=None means every estate (unscoped superuser).
        Raises ValidationError on malformed filter params.
        """
        qs = EntryLog.objects.all()
        if estate_id is not None:
            qs = qs.filter(estate_id=estate_id)

        f = EntryLogFilter(data=params, queryset=qs)
        if not f.is_valid():
            raise ValidationError(f.errors)
        return _with_people(f.qs).order_by("-validated_at")


class DashboardSelector:
    @staticmethod
    def stats(*, estate_id: Optional[UUID], at: Optional[datetime] = None) -> dict[str, Any]:
        clock = read_clock(at)

        homes = Home.objects.filter(is_active=True)
        residents = EstateMembership.objects.filter(role=MembershipRole.RESIDENT, is_active=True)
        logs = EntryLog.objects.all()
        if estate_id is not None:
            homes = homes.filter(estate_id=estate_id)
            residents = residents.filter(estate_id=estate_id)
            logs = logs.filter(estate_id=estate_id)

        today = logs.filter(validated_at__date=clock.today).aggregate(
            total=Count("id"),
            granted=Count("id", filter=Q(result=EntryResult.GRANTED)),
            denied=Count("id", filter=Q(result=EntryResult.DENIED)),
        )

        return {
            "total_homes": homes.count(),
            "total_residents": residents.count(),
            "active_codes_today": AccessCodeSelector.count_active_for_day(day=clock.today, estate_id=estate_id),
            "entries_today": {
                "total": today["total"],
                "granted": today["granted"],
                "denied": today["denied"],
            },
            "recent_activity": list(
                _with_people(logs).order_by("-validated_at")[:DASHBOARD_ACTIVITY_LIMIT]
            ),
        }
