# vm_core/gate/services.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

from django.conf import settings
from django.db import transaction

from vm_core.access_codes.models import AccessCode, AccessCodeStatus
from vm_core.common.clock import read_clock
from vm_core.gate.engine import ValidationEngine, ValidationResult
from vm_core.gate.models import DEFAULT_GATE, EntryLog

logger = logging.getLogger(__name__)

SUBMITTED_CODE_MAX = 5
MISSING_CODE = "N/A"


def default_gate() -> str:
    return getattr(settings, "VM_DEFAULT_GATE", DEFAULT_GATE) or DEFAULT_GATE


def normalise_submitted_code(value: Optional[str]) -> str:
    code = (value or "").strip().upper()
    return code[:SUBMITTED_CODE_MAX] or MISSING_CODE


class EntryLogRecorder:
    """
    Writes exactly one EntryLog per validation attempt and applies the
    active -> used transition for grants.

    The transition is a conditional update; a grant that finds the row no
    longer active lost a race and is re-derived from the fresh row, so at
    most one grant is ever logged per code.
    """

    @staticmethod
    def _mark_used(*, access_code_id: UUID, at: datetime) -> bool:
        updated = AccessCode.objects.filter(
            id=access_code_id,
            status=AccessCodeStatus.ACTIVE,
        ).update(status=AccessCodeStatus.USED, used_at=at, updated_at=at)
        return updated == 1

    @staticmethod
    def _rederive(outcome: ValidationResult) -> ValidationResult:
        fresh = AccessCode.objects.select_related(
            "resident",
            "resident__estate_membership__home",
        ).get(id=outcome.access_code_id)
        return ValidationEngine.evaluate(
            fresh,
            submitted_code=outcome.code,
            clock=read_clock(outcome.validated_at),
        )

    @staticmethod
    @transaction.atomic
    def record_outcome(
        validation_result: ValidationResult,
        security_id: int,
        gate: Optional[str] = None,
        estate_id: Optional[UUID] = None,
    ) -> Tuple[ValidationResult, EntryLog]:
        outcome = validation_result

        if outcome.granted and outcome.access_code_id:
            if not EntryLogRecorder._mark_used(access_code_id=outcome.access_code_id, at=outcome.validated_at):
                outcome = EntryLogRecorder._rederive(outcome)
                logger.warning(
                    "Lost grant race for access code %s; recorded as %s (%s)",
                    validation_result.access_code_id,
                    outcome.result,
                    outcome.reason_code,
                )

        entry_log = EntryLog.objects.create(
            access_code_id=outcome.access_code_id,
            submitted_code=normalise_submitted_code(outcome.code),
            resident_id=outcome.resident_id,
            security_id=security_id,
            estate_id=estate_id,
            result=outcome.result,
            reason_code=outcome.reason_code,
            reason=(outcome.reason or "")[:255],
            gate=(gate or default_gate())[:100],
            validated_at=outcome.validated_at,
        )
        return outcome, entry_log

    @staticmethod
    def record(
        validation_result: ValidationResult,
        security_id: int,
        gate: Optional[str] = None,
        estate_id: Optional[UUID] = None,
    ) -> EntryLog:
        _, entry_log = EntryLogRecorder.record_outcome(
            validation_result,
            security_id,
            gate=gate,
            estate_id=estate_id,
        )
        return entry_log


class GateService:
    @staticmethod
    @transaction.atomic
    def validate_code(
        *,
        submitted_code: str,
        security_id: int,
        gate: Optional[str] = None,
        estate_id: Optional[UUID] = None,
        at: Optional[datetime] = None,
    ) -> Tuple[ValidationResult, EntryLog]:
        """
        Engine + recorder in one transaction.
        Returns the final outcome (after any lost race) and its log row.
        """
        outcome = ValidationEngine.validate(submitted_code, estate_id=estate_id, at=at)
        outcome, entry_log = EntryLogRecorder.record_outcome(
            outcome,
            security_id,
            gate=gate,
            estate_id=estate_id,
        )
        logger.info(
            "Gate %s: %s %s (%s) by security %s",
            entry_log.gate,
            entry_log.submitted_code,
            outcome.result,
            outcome.reason_code,
            security_id,
        )
        return outcome, entry_log
