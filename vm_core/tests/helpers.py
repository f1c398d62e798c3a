# vm_core/tests/helpers.py
from datetime import date, datetime, time

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from vm_core.access_codes.models import AccessCode, AccessCodeStatus
from vm_core.iam.models import EstateMembership

# Fixed calendar day for time-window tests; instants are built with site_time().
VISIT_DAY = date(2030, 6, 15)


def site_time(hh: int, mm: int, day: date = VISIT_DAY, ss: int = 0) -> datetime:
    """
    Aware instant at hh:mm on `day` in the site time zone.
    """
    return timezone.make_aware(datetime.combine(day, time(hh, mm, ss)))


def make_user(username: str, *, estate=None, role=None, home=None, **extra):
    User = get_user_model()
    user = User.objects.create_user(username=username, password="pass12345", **extra)
    if estate is not None and role is not None:
        EstateMembership.objects.create(user=user, estate=estate, home=home, role=role)
    return user


def make_code(
    resident,
    *,
    code: str = "ABC23",
    visit_date: date = VISIT_DAY,
    start: time = time(9, 0),
    end: time = time(17, 0),
    status: str = AccessCodeStatus.ACTIVE,
    visitor_name: str = "Ada Visitor",
    estate_id=None,
) -> AccessCode:
    """
    Inserts a row directly, bypassing the generator, so tests control the code value.
    """
    if estate_id is None:
        estate_id = resident.estate_membership.estate_id
    return AccessCode.objects.create(
        estate_id=estate_id,
        code=code,
        resident=resident,
        visit_date=visit_date,
        start_time=start,
        end_time=end,
        status=status,
        visitor_name=visitor_name,
    )


def client_for(user) -> APIClient:
    c = APIClient()
    c.force_authenticate(user=user)
    return c
