# vm_core/gate/engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

from vm_core.access_codes.models import AccessCode, AccessCodeStatus
from vm_core.access_codes.selectors import AccessCodeSelector
from vm_core.common.clock import SiteClock, read_clock
from vm_core.gate.models import EntryResult, ReasonCode
from vm_core.iam.selectors import display_name

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Outcome of evaluating one submitted code.

    access_code_id / resident_id are set whenever a row was resolved,
    including denials; both are None on CODE_NOT_FOUND.
    """
    result: str
    reason_code: str
    code: str
    validated_at: datetime
    reason: str = ""
    access_code_id: Optional[UUID] = None
    resident_id: Optional[int] = None
    visitor_info: Optional[dict[str, Any]] = None
    resident_info: Optional[dict[str, Any]] = None
    visit_details: Optional[dict[str, Any]] = None

    @property
    def granted(self) -> bool:
        return self.result == EntryResult.GRANTED

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "result": self.result,
            "code": self.code,
            "reason_code": self.reason_code,
            "access_code_id": str(self.access_code_id) if self.access_code_id else None,
            "resident_id": self.resident_id,
            "validated_at": self.validated_at.isoformat(),
        }
        if self.granted:
            payload["visitor_info"] = self.visitor_info
            payload["resident_info"] = self.resident_info
            payload["visit_details"] = self.visit_details
        else:
            payload["reason"] = self.reason
        return payload


# A check returns None to pass, or (reason_code, reason) to deny.
Denial = tuple[str, str]
Check = Callable[[AccessCode, SiteClock], Optional[Denial]]


def _hhmm(value) -> str:
    return value.strftime("%H:%M")


def check_not_cancelled(access_code: AccessCode, clock: SiteClock) -> Optional[Denial]:
    if access_code.status == AccessCodeStatus.CANCELLED:
        return ReasonCode.CODE_CANCELLED, "Access code has been cancelled by resident"
    return None


def check_visit_date(access_code: AccessCode, clock: SiteClock) -> Optional[Denial]:
    if access_code.visit_date != clock.today:
        return ReasonCode.INVALID_DATE, f"Access code is valid for {access_code.visit_date.isoformat()}, not today"
    return None


def check_window_started(access_code: AccessCode, clock: SiteClock) -> Optional[Denial]:
    if clock.minute < access_code.window_start:
        return ReasonCode.TOO_EARLY, f"Access not yet active. Valid from {_hhmm(access_code.start_time)}"
    return None


def check_window_open(access_code: AccessCode, clock: SiteClock) -> Optional[Denial]:
    if access_code.is_past_window(clock):
        return ReasonCode.CODE_EXPIRED, f"Access code expired at {_hhmm(access_code.end_time)}"
    return None


def check_not_swept(access_code: AccessCode, clock: SiteClock) -> Optional[Denial]:
    if access_code.status == AccessCodeStatus.EXPIRED:
        return ReasonCode.CODE_EXPIRED, f"Access code expired at {_hhmm(access_code.end_time)}"
    return None


def check_not_used(access_code: AccessCode, clock: SiteClock) -> Optional[Denial]:
    if access_code.status == AccessCodeStatus.USED:
        return ReasonCode.CODE_ALREADY_USED, "Access code has already been used"
    return None


# Order matters: the first failing check decides the denial.
VALIDATION_CHECKS: tuple[tuple[str, Check], ...] = (
    ("not_cancelled", check_not_cancelled),
    ("visit_date", check_visit_date),
    ("window_started", check_window_started),
    ("window_open", check_window_open),
    ("not_swept", check_not_swept),
    ("not_used", check_not_used),
)


def _home_snapshot(resident) -> Optional[dict[str, Any]]:
    membership = getattr(resident, "estate_membership", None)
    home = getattr(membership, "home", None)
    if home is None:
        return None
    return {"name": home.name, "plot_number": home.plot_number, "street": home.street}


class ValidationEngine:
    """
    Pure decision layer: reads one row, writes nothing.
    Persisting the outcome is EntryLogRecorder's job.
    """

    @staticmethod
    def normalise(submitted_code: str) -> str:
        return (submitted_code or "").strip().upper()

    @staticmethod
    def lookup(code: str, *, clock: SiteClock, estate_id: Optional[UUID] = None) -> Optional[AccessCode]:
        return AccessCodeSelector.find_for_validation(code=code, today=clock.today, estate_id=estate_id)

    @staticmethod
    def run_checks(access_code: AccessCode, clock: SiteClock) -> Optional[tuple[str, str, str]]:
        """
        Returns (check_name, reason_code, reason) for the first failing check,
        or None when every check passes.
        """
        for name, check in VALIDATION_CHECKS:
            denial = check(access_code, clock)
            if denial is not None:
                reason_code, reason = denial
                return name, reason_code, reason
        return None

    @staticmethod
    def evaluate(
        access_code: Optional[AccessCode],
        *,
        submitted_code: str,
        clock: SiteClock,
    ) -> ValidationResult:
        if access_code is None:
            return ValidationResult(
                result=EntryResult.DENIED,
                reason_code=ReasonCode.CODE_NOT_FOUND,
                reason="Access code not found",
                code=submitted_code,
                validated_at=clock.instant,
            )

        failed = ValidationEngine.run_checks(access_code, clock)
        if failed is not None:
            _, reason_code, reason = failed
            return ValidationResult(
                result=EntryResult.DENIED,
                reason_code=reason_code,
                reason=reason,
                code=access_code.code,
                validated_at=clock.instant,
                access_code_id=access_code.id,
                resident_id=access_code.resident_id,
            )

        return ValidationResult(
            result=EntryResult.GRANTED,
            reason_code=ReasonCode.GRANTED,
            reason="Access granted",
            code=access_code.code,
            validated_at=clock.instant,
            access_code_id=access_code.id,
            resident_id=access_code.resident_id,
            visitor_info={"name": access_code.visitor_name},
            resident_info={
                "name": display_name(access_code.resident),
                "home": _home_snapshot(access_code.resident),
            },
            visit_details={
                "visit_date": access_code.visit_date.isoformat(),
                "start_time": _hhmm(access_code.start_time),
                "end_time": _hhmm(access_code.end_time),
            },
        )

    @staticmethod
    def validate(
        submitted_code: str,
        estate_id: Optional[UUID] = None,
        at: Optional[datetime] = None,
    ) -> ValidationResult:
        clock = read_clock(at)
        code = ValidationEngine.normalise(submitted_code)
        access_code = ValidationEngine.lookup(code, clock=clock, estate_id=estate_id)
        outcome = ValidationEngine.evaluate(access_code, submitted_code=code, clock=clock)
        logger.info("Validation of %s: %s (%s)", code, outcome.result, outcome.reason_code)
        return outcome
