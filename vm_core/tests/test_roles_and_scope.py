import pytest
from django.core.exceptions import ValidationError
from rest_framework.exceptions import PermissionDenied, ValidationError as DRFValidationError
from rest_framework.test import APIRequestFactory

from vm_core.common.permissions import ROLE_ADMIN, ROLE_RESIDENT, ROLE_SECURITY, _user_roles
from vm_core.common.scope import resolve_estate_id
from vm_core.iam.models import EstateMembership, MembershipRole
from vm_core.tests.helpers import make_user

pytestmark = pytest.mark.django_db


def _request(user, **headers):
    request = APIRequestFactory().get("/api/v1/entry-logs/", **headers)
    request.user = user
    return request


def test_roles_come_from_membership(resident, guard, estate_admin):
    assert _user_roles(resident) == {ROLE_RESIDENT}
    assert _user_roles(guard) == {ROLE_SECURITY}
    assert _user_roles(estate_admin) == {ROLE_ADMIN}


def test_superuser_is_admin_everywhere():
    root = make_user("root", is_superuser=True)
    assert _user_roles(root) == {ROLE_ADMIN}


def test_inactive_membership_has_no_role(resident):
    EstateMembership.objects.filter(user=resident).update(is_active=False)
    assert _user_roles(resident) == set()


def test_member_scope_ignores_header(guard, estate, other_estate):
    request = _request(guard, HTTP_X_ESTATE_ID=str(other_estate.id))
    assert resolve_estate_id(request) == estate.id


def test_superuser_scope_from_header(other_estate):
    root = make_user("root", is_superuser=True)

    assert resolve_estate_id(_request(root)) is None
    assert resolve_estate_id(_request(root, HTTP_X_ESTATE_ID=str(other_estate.id))) == other_estate.id
    with pytest.raises(DRFValidationError):
        resolve_estate_id(_request(root, HTTP_X_ESTATE_ID="not-a-uuid"))


def test_user_without_membership_has_no_scope(db):
    loner = make_user("loner")
    with pytest.raises(PermissionDenied):
        resolve_estate_id(_request(loner))


def test_resident_membership_requires_home_in_same_estate(estate, other_estate, home):
    user = make_user("newcomer")

    homeless = EstateMembership(user=user, estate=estate, role=MembershipRole.RESIDENT)
    with pytest.raises(ValidationError):
        homeless.clean()

    misplaced = EstateMembership(user=user, estate=other_estate, home=home, role=MembershipRole.RESIDENT)
    with pytest.raises(ValidationError):
        misplaced.clean()
