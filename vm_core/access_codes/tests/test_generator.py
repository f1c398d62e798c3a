import pytest
from datetime import timedelta

from vm_core.access_codes.generator import (
    CODE_ALPHABET,
    CODE_LENGTH,
    AccessCodeGenerator,
    CodeGenerationExhausted,
)
from vm_core.access_codes.models import AccessCodeStatus
from vm_core.tests.helpers import VISIT_DAY, make_code

pytestmark = pytest.mark.django_db


def _draws(monkeypatch, values):
    it = iter(values)
    calls = []

    def fake():
        value = next(it)
        calls.append(value)
        return value

    monkeypatch.setattr(AccessCodeGenerator, "random_code", staticmethod(fake))
    return calls


def test_random_code_uses_unambiguous_alphabet():
    for _ in range(200):
        code = AccessCodeGenerator.random_code()
        assert len(code) == CODE_LENGTH
        assert set(code) <= set(CODE_ALPHABET)
        assert not set(code) & {"I", "O", "0", "1"}


def test_generate_skips_codes_held_on_the_same_day(monkeypatch, resident):
    make_code(resident, code="ABC23")
    calls = _draws(monkeypatch, ["ABC23", "ABC23", "XYZ45"])

    assert AccessCodeGenerator.generate(VISIT_DAY) == "XYZ45"
    assert calls == ["ABC23", "ABC23", "XYZ45"]


def test_used_code_still_reserves_its_value(monkeypatch, resident):
    make_code(resident, code="ABC23", status=AccessCodeStatus.USED)
    _draws(monkeypatch, ["ABC23", "XYZ45"])

    assert AccessCodeGenerator.generate(VISIT_DAY) == "XYZ45"


@pytest.mark.parametrize("status", [AccessCodeStatus.CANCELLED, AccessCodeStatus.EXPIRED])
def test_dead_codes_release_their_value(monkeypatch, resident, status):
    make_code(resident, code="ABC23", status=status)
    _draws(monkeypatch, ["ABC23"])

    assert AccessCodeGenerator.generate(VISIT_DAY) == "ABC23"


def test_same_value_is_free_on_another_day(monkeypatch, resident):
    make_code(resident, code="ABC23")
    _draws(monkeypatch, ["ABC23"])

    assert AccessCodeGenerator.generate(VISIT_DAY + timedelta(days=1)) == "ABC23"


def test_generate_gives_up_after_configured_attempts(monkeypatch, settings, resident):
    settings.VM_ACCESS_CODE_MAX_ATTEMPTS = 3
    make_code(resident, code="ABC23")
    calls = _draws(monkeypatch, ["ABC23"] * 10)

    with pytest.raises(CodeGenerationExhausted) as exc:
        AccessCodeGenerator.generate(VISIT_DAY)

    assert exc.value.attempts == 3
    assert exc.value.visit_date == VISIT_DAY
    assert len(calls) == 3
