"""Tests for the company profile and acronym derivation."""

import pytest

from gstbill.models.company import Company
from gstbill.schemas.company import CompanyUpdate
from gstbill.services.company_service import CompanyService, derive_acronym, resolve_acronym


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Acme Global Traders", "AGT"),
        ("acme   global traders", "AGT"),
        ("123 Traders", "T"),
        ("M/s. Sharma & Sons", "MSS"),
        ("", ""),
        ("   ", ""),
        (None, ""),
    ],
)
def test_derive_acronym(name, expected) -> None:
    assert derive_acronym(name) == expected


def test_explicit_prefix_wins() -> None:
    company = Company(company_name="Acme Global Traders", invoice_prefix=" ACME ")
    assert resolve_acronym(company) == "ACME"


def test_blank_prefix_falls_back_to_name() -> None:
    company = Company(company_name="Acme Global Traders", invoice_prefix="  ")
    assert resolve_acronym(company) == "AGT"
    assert resolve_acronym(None) == ""


async def test_upsert_profile(db_session) -> None:
    service = CompanyService(db_session)
    assert await service.get_profile() is None

    created = await service.upsert_profile(CompanyUpdate(company_name="Acme Global Traders", state_code="19"))
    updated = await service.upsert_profile(CompanyUpdate(invoice_prefix="ACM"))

    assert updated.id == created.id
    assert updated.company_name == "Acme Global Traders"
    assert updated.state_code == "19"
    assert resolve_acronym(await service.get_profile()) == "ACM"
