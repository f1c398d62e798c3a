import pytest

from django.contrib import admin
from django.test import RequestFactory

from vm_core.access_codes.models import AccessCode
from vm_core.tests.helpers import make_code, make_user

pytestmark = pytest.mark.django_db


@pytest.fixture
def superuser_request():
    request = RequestFactory().get("/admin/access_codes/accesscode/")
    request.user = make_user("root", is_staff=True, is_superuser=True)
    return request


def test_admin_cannot_add_access_codes(superuser_request):
    model_admin = admin.site._registry[AccessCode]

    assert model_admin.has_add_permission(superuser_request) is False


def test_admin_window_and_code_are_read_only(superuser_request, resident):
    ac = make_code(resident)
    model_admin = admin.site._registry[AccessCode]

    readonly = model_admin.get_readonly_fields(superuser_request, ac)

    for field in ("code", "visit_date", "start_time", "end_time", "status"):
        assert field in readonly
