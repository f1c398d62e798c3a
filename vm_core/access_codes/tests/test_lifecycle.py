import pytest
from datetime import time, timedelta

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from vm_core.access_codes.generator import AccessCodeGenerator, CodeGenerationExhausted
from vm_core.access_codes.models import AccessCode, AccessCodeStatus
from vm_core.access_codes.selectors import AccessCodeSelector
from vm_core.access_codes.services import AccessCodeService, CodeNotCancellable
from vm_core.tests.helpers import VISIT_DAY, make_code, site_time

pytestmark = pytest.mark.django_db


@pytest.fixture
def plain_qr(settings):
    settings.VM_QR_ENCODER = "vm_core.access_codes.tests.test_lifecycle.fake_qr"


def fake_qr(code: str) -> str:
    return f"qr:{code}"


def _create(resident, **overrides):
    kwargs = dict(
        resident_id=resident.id,
        estate_id=resident.estate_membership.estate_id,
        visit_date=VISIT_DAY,
        start_time=time(9, 0),
        end_time=time(17, 0),
        visitor_name="  Ada Visitor ",
    )
    kwargs.update(overrides)
    return AccessCodeService.create_code(**kwargs)


# ----------------------------
# Create
# ----------------------------
def test_create_code_persists_active_code_with_qr(resident):
    ac = _create(resident)

    ac.refresh_from_db()
    assert ac.status == AccessCodeStatus.ACTIVE
    assert len(ac.code) == 5
    assert ac.visitor_name == "Ada Visitor"
    assert ac.estate_id == resident.estate_membership.estate_id
    assert ac.qr_code_data.startswith("data:image/png;base64,")
    assert ac.used_at is None and ac.cancelled_at is None and ac.expired_at is None


def test_create_code_rejects_inverted_window(resident, plain_qr):
    with pytest.raises(ValidationError):
        _create(resident, start_time=time(17, 0), end_time=time(9, 0))

    assert AccessCode.objects.count() == 0


def test_create_code_stores_window_at_minute_resolution(resident, plain_qr):
    ac = _create(resident, start_time=time(9, 0, 30), end_time=time(17, 0, 45, 500))

    ac.refresh_from_db()
    assert ac.start_time == time(9, 0)
    assert ac.end_time == time(17, 0)


def test_create_code_rejects_window_shorter_than_a_minute(resident, plain_qr):
    with pytest.raises(ValidationError):
        _create(resident, start_time=time(9, 0, 10), end_time=time(9, 0, 50))

    assert AccessCode.objects.count() == 0


def test_insert_collision_regenerates_once(monkeypatch, resident, plain_qr):
    make_code(resident, code="ABC23")

    # The pre-insert check is fooled, so only the database constraint catches the duplicate.
    draws = iter(["ABC23", "XYZ45"])
    monkeypatch.setattr(AccessCodeGenerator, "random_code", staticmethod(lambda: next(draws)))
    monkeypatch.setattr(AccessCodeGenerator, "is_code_unique", staticmethod(lambda code, visit_date: True))

    ac = _create(resident)

    assert ac.code == "XYZ45"
    assert ac.qr_code_data == "qr:XYZ45"
    assert AccessCode.objects.filter(visit_date=VISIT_DAY).count() == 2


def test_insert_collision_without_retries_is_exhaustion(monkeypatch, settings, resident, plain_qr):
    settings.VM_ACCESS_CODE_INSERT_RETRIES = 0
    make_code(resident, code="ABC23")
    monkeypatch.setattr(AccessCodeGenerator, "random_code", staticmethod(lambda: "ABC23"))
    monkeypatch.setattr(AccessCodeGenerator, "is_code_unique", staticmethod(lambda code, visit_date: True))

    with pytest.raises(CodeGenerationExhausted) as exc:
        _create(resident)

    assert exc.value.attempts == 1
    assert "after 1 insert rounds" in str(exc.value)
    assert AccessCode.objects.count() == 1


# ----------------------------
# Cancel
# ----------------------------
def test_owner_cancels_active_code(resident):
    ac = make_code(resident)
    at = site_time(8, 0)

    out = AccessCodeService.cancel_code(access_code_id=ac.id, owner_id=resident.id, at=at)

    assert out.status == AccessCodeStatus.CANCELLED
    assert out.cancelled_at == at


@pytest.mark.parametrize(
    "status",
    [AccessCodeStatus.USED, AccessCodeStatus.EXPIRED, AccessCodeStatus.CANCELLED],
)
def test_only_active_codes_can_be_cancelled(resident, status):
    ac = make_code(resident, status=status)

    with pytest.raises(CodeNotCancellable) as exc:
        AccessCodeService.cancel_code(access_code_id=ac.id, owner_id=resident.id)

    assert exc.value.status == status
    ac.refresh_from_db()
    assert ac.status == status


def test_cancel_someone_elses_code_is_not_found(resident, other_resident):
    ac = make_code(resident)

    with pytest.raises(AccessCodeSelector.NotFound):
        AccessCodeService.cancel_code(access_code_id=ac.id, owner_id=other_resident.id)

    ac.refresh_from_db()
    assert ac.status == AccessCodeStatus.ACTIVE


def test_live_codes_are_unique_per_day(resident):
    make_code(resident, code="ABC23")

    with pytest.raises(IntegrityError):
        with transaction.atomic():
            make_code(resident, code="ABC23", status=AccessCodeStatus.USED)


def test_cancelled_code_frees_its_value_for_the_day(resident):
    ac = make_code(resident, code="ABC23")
    AccessCodeService.cancel_code(access_code_id=ac.id, owner_id=resident.id)

    # Partial unique constraint only covers live codes.
    make_code(resident, code="ABC23")
    assert AccessCode.objects.filter(code="ABC23", visit_date=VISIT_DAY).count() == 2


# ----------------------------
# Expiry sweep
# ----------------------------
def test_recycle_expired_marks_only_past_window_active_codes(resident):
    yesterday = make_code(resident, code="AAAA2", visit_date=VISIT_DAY - timedelta(days=1))
    ended = make_code(resident, code="BBBB2", end=time(17, 0))
    still_open = make_code(resident, code="CCCC2", end=time(17, 1))
    tomorrow = make_code(resident, code="DDDD2", visit_date=VISIT_DAY + timedelta(days=1))
    used = make_code(resident, code="EEEE2", status=AccessCodeStatus.USED, end=time(10, 0))
    cancelled = make_code(resident, code="FFFF2", status=AccessCodeStatus.CANCELLED, end=time(10, 0))

    at = site_time(17, 1)
    assert AccessCodeService.recycle_expired(at=at) == 2

    for ac in (yesterday, ended, still_open, tomorrow, used, cancelled):
        ac.refresh_from_db()

    assert yesterday.status == AccessCodeStatus.EXPIRED
    assert ended.status == AccessCodeStatus.EXPIRED
    assert ended.expired_at == at
    assert still_open.status == AccessCodeStatus.ACTIVE
    assert tomorrow.status == AccessCodeStatus.ACTIVE
    assert used.status == AccessCodeStatus.USED
    assert cancelled.status == AccessCodeStatus.CANCELLED


def test_recycle_expired_keeps_end_minute_valid(resident):
    ac = make_code(resident, end=time(17, 0))

    assert AccessCodeService.recycle_expired(at=site_time(17, 0, ss=59)) == 0
    ac.refresh_from_db()
    assert ac.status == AccessCodeStatus.ACTIVE


def test_recycle_expired_is_idempotent(resident):
    make_code(resident, code="AAAA2", end=time(10, 0))
    make_code(resident, code="BBBB2", end=time(11, 0))
    at = site_time(12, 0)

    assert AccessCodeService.recycle_expired(at=at) == 2
    assert AccessCodeService.recycle_expired(at=at) == 0
    assert AccessCode.objects.filter(status=AccessCodeStatus.EXPIRED).count() == 2
