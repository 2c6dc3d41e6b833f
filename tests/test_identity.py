"""Tests for role resolution of signed-in users."""

import pytest

from clinic_scheduler.identity import AdminRole, IdentityResolver, PatientRole, role_for
from clinic_scheduler.schemas.patient_schema import AppUser, UserRole
from tests.conftest import add_patient


@pytest.fixture
def resolver(stores) -> IdentityResolver:
    return IdentityResolver(stores.users, stores.patients, admin_emails=["Admin@Clinic.example"])


class TestRoleFor:
    def test_admin_user(self):
        assert role_for(AppUser(uid="u1", email="a@b.pl", role=UserRole.ADMIN)) == AdminRole()

    def test_patient_user(self):
        user = AppUser(uid="u1", email="a@b.pl", role=UserRole.PATIENT, patient_id="p-1")
        assert role_for(user) == PatientRole("p-1")


class TestEnsureUser:
    @pytest.mark.asyncio
    async def test_allow_listed_email_becomes_admin(self, resolver):
        user = await resolver.ensure_user("u1", " admin@CLINIC.example ")
        assert user.role == UserRole.ADMIN
        assert user.email == "admin@clinic.example"

    @pytest.mark.asyncio
    async def test_matching_patient_is_linked(self, stores, resolver):
        patient = await add_patient(stores, email="jan@example.com")

        role = await resolver.resolve_role("u2", "Jan@Example.com")

        assert role == PatientRole(patient.id)

    @pytest.mark.asyncio
    async def test_unknown_email_is_unlinked_patient(self, resolver):
        role = await resolver.resolve_role("u3", "stranger@example.com")
        assert role == PatientRole(None)

    @pytest.mark.asyncio
    async def test_existing_user_returned_unchanged(self, stores, resolver):
        await resolver.ensure_user("u4", "late@example.com")
        await add_patient(stores, email="late@example.com")

        user = await resolver.ensure_user("u4", "late@example.com")

        assert user.patient_id is None

    @pytest.mark.asyncio
    async def test_empty_allow_list(self, stores):
        resolver = IdentityResolver(stores.users, stores.patients, admin_emails=[])
        user = await resolver.ensure_user("u5", "admin@clinic.example")
        assert user.role == UserRole.PATIENT


class TestLinkUser:
    @pytest.mark.asyncio
    async def test_link_after_signup(self, stores, resolver):
        await resolver.ensure_user("u6", "late@example.com")
        patient = await add_patient(stores, email="late@example.com")

        linked = await resolver.link_user_to_patient("u6", patient.id)

        assert linked.patient_id == patient.id
        assert await resolver.resolve_role("u6", "late@example.com") == PatientRole(patient.id)

    @pytest.mark.asyncio
    async def test_link_missing_user(self, resolver):
        assert await resolver.link_user_to_patient("nobody", "p-1") is None
