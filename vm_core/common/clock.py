# vm_core/common/clock.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from django.utils import timezone


@dataclass(frozen=True)
class SiteClock:
    """
    Wall-clock reading in the site time zone (settings.TIME_ZONE).

    Access windows are HH:MM values, so `minute` drops seconds:
    a code ending at 17:00 is still valid at 17:00:59.
    """
    instant: datetime
    today: date
    minute: time


def read_clock(at: Optional[datetime] = None) -> SiteClock:
    instant = at or timezone.now()
    local = timezone.localtime(instant)
    return SiteClock(
        instant=instant,
        today=local.date(),
        minute=local.time().replace(second=0, microsecond=0),
    )
