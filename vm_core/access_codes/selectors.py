# vm_core/access_codes/selectors.py
from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from django.db.models import Case, IntegerField, Q, QuerySet, Value, When

from vm_core.access_codes.models import RESERVING_STATUSES, AccessCode, AccessCodeStatus
from vm_core.common.clock import SiteClock


class AccessCodeSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get_owned_code(*, access_code_id: UUID, owner_id: int) -> AccessCode:
        try:
            return AccessCode.objects.get(id=access_code_id, resident_id=owner_id)
        except AccessCode.DoesNotExist:
            raise AccessCodeSelector.NotFound()

    @staticmethod
    def list_resident_codes(*, owner_id: int, status: Optional[str] = None) -> QuerySet[AccessCode]:
        """
        status: one of AccessCodeStatus values, or None/"all" for everything.
        """
        qs = AccessCode.objects.filter(resident_id=owner_id)
        if status and status != "all":
            qs = qs.filter(status=status)
        return qs.order_by("-created_at")

    @staticmethod
    def find_for_validation(*, code: str, today: date, estate_id: Optional[UUID] = None) -> Optional[AccessCode]:
        """
        Single lookup by code value, no date filter.

        A value can be reused across dates (and after cancel/expiry), so when
        several rows match: today's row first, live (active/used) before dead,
        then the most recent visit_date.
        """
        qs = AccessCode.objects.select_related(
            "resident",
            "resident__estate_membership__home",
        ).filter(code=code)

        if estate_id is not None:
            qs = qs.filter(estate_id=estate_id)

        return (
            qs.annotate(
                _today_rank=Case(
                    When(visit_date=today, then=Value(0)),
                    default=Value(1),
                    output_field=IntegerField(),
                ),
                _live_rank=Case(
                    When(status__in=RESERVING_STATUSES, then=Value(0)),
                    default=Value(1),
                    output_field=IntegerField(),
                ),
            )
            .order_by("_today_rank", "_live_rank", "-visit_date", "-created_at")
            .first()
        )

    @staticmethod
    def stale_active_codes(*, clock: SiteClock) -> QuerySet[AccessCode]:
        """
        Active codes whose window has closed: an earlier date, or today with
        end_time before the current minute. Same boundary as AccessCode.is_past_window.
        """
        return AccessCode.objects.filter(status=AccessCodeStatus.ACTIVE).filter(
            Q(visit_date__lt=clock.today) | Q(visit_date=clock.today, end_time__lt=clock.minute)
        )

    @staticmethod
    def count_active_for_day(*, day: date, estate_id: Optional[UUID] = None) -> int:
        qs = AccessCode.objects.filter(visit_date=day, status=AccessCodeStatus.ACTIVE)
        if estate_id is not None:
            qs = qs.filter(estate_id=estate_id)
        return qs.count()
