# vm_core/access_codes/generator.py
from __future__ import annotations

import logging
import secrets
from datetime import date

from django.conf import settings

from vm_core.access_codes.models import RESERVING_STATUSES, AccessCode

logger = logging.getLogger(__name__)

# Uppercase letters and digits without I, O, 0, 1 (32 symbols).
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 5

DEFAULT_MAX_ATTEMPTS = 10


class CodeGenerationExhausted(Exception):
    """
    No unique code could be found within the retry bound.
    Callers must not persist a code after this; surface a retry-later response instead.
    """

    def __init__(self, visit_date: date, attempts: int, unit: str = "draws"):
        super().__init__(f"Unable to generate a unique access code for {visit_date} after {attempts} {unit}.")
        self.visit_date = visit_date
        self.attempts = attempts
        self.unit = unit


def _max_attempts() -> int:
    return max(1, int(getattr(settings, "VM_ACCESS_CODE_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)))


class AccessCodeGenerator:
    """
    Stateless generator: every call reads the store, nothing is cached in-process.
    """

    @staticmethod
    def random_code() -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))

    @staticmethod
    def is_code_unique(code: str, visit_date: date) -> bool:
        return not AccessCode.objects.filter(
            code=code,
            visit_date=visit_date,
            status__in=RESERVING_STATUSES,
        ).exists()

    @staticmethod
    def generate(visit_date: date) -> str:
        """
        Returns a code not held by any active/used code on visit_date.
        Raises CodeGenerationExhausted after the configured number of draws.

        The check is not atomic with the later insert; the database constraint
        on (code, visit_date) is the backstop for concurrent callers.
        """
        attempts = _max_attempts()
        for attempt in range(1, attempts + 1):
            code = AccessCodeGenerator.random_code()
            if AccessCodeGenerator.is_code_unique(code, visit_date):
                return code
            logger.info("Access code collision for %s (attempt %s/%s)", visit_date, attempt, attempts)

        logger.error("Access code generation exhausted for %s after %s attempts", visit_date, attempts)
        raise CodeGenerationExhausted(visit_date, attempts)
