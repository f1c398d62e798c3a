# vm_core/conftest.py
import pytest

from vm_core.estates.models import Estate, Home
from vm_core.iam.models import MembershipRole
from vm_core.tests.helpers import client_for, make_user


@pytest.fixture
def estate(db):
    return Estate.objects.create(code="palm-grove", name="Palm Grove Estate")


@pytest.fixture
def other_estate(db):
    return Estate.objects.create(code="cedar-court", name="Cedar Court")


@pytest.fixture
def home(estate):
    return Home.objects.create(estate=estate, name="The Okafors", plot_number="12B", street="Palm Avenue")


@pytest.fixture
def resident(estate, home):
    return make_user(
        "resident1",
        estate=estate,
        role=MembershipRole.RESIDENT,
        home=home,
        first_name="Chidi",
        last_name="Okafor",
    )


@pytest.fixture
def other_resident(estate):
    other_home = Home.objects.create(estate=estate, name="The Balogun", plot_number="7", street="Palm Avenue")
    return make_user("resident2", estate=estate, role=MembershipRole.RESIDENT, home=other_home)


@pytest.fixture
def guard(estate):
    return make_user("guard1", estate=estate, role=MembershipRole.SECURITY, first_name="Musa", last_name="Bello")


@pytest.fixture
def estate_admin(estate):
    return make_user("admin1", estate=estate, role=MembershipRole.ADMIN)


@pytest.fixture
def resident_client(resident):
    return client_for(resident)


@pytest.fixture
def guard_client(guard):
    return client_for(guard)


@pytest.fixture
def estate_admin_client(estate_admin):
    return client_for(estate_admin)
