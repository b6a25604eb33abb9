"""
Pytest configuration and shared fixtures for the rental rules engine tests.

Provides:
- anyio backend selection for `@pytest.mark.anyio` tests
- A fixed reference date so date windows and age checks are stable
- A complete, valid rental application submission (tenant, employed)
- Context builders for strict and draft validation
- Correlation context reset between tests
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Generator
from datetime import date
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]

# Add the package root to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402 (import after path setup)

from rental_rules.core.observability import set_submission_id, set_wizard  # noqa: E402
from rental_rules.domain.enums import EntityType, SaveMode  # noqa: E402
from rental_rules.rules.context import ValidationContext  # noqa: E402

REFERENCE_DATE = date(2026, 1, 15)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_correlation_context() -> Generator[None]:
    """Each test starts without a submission id or wizard name."""
    set_submission_id("")
    set_wizard("")
    yield
    set_submission_id("")
    set_wizard("")


@pytest.fixture
def today() -> date:
    return REFERENCE_DATE


@pytest.fixture
def application_fields() -> dict[str, Any]:
    """A tenant application that validates strictly on every step."""
    return {
        # identity
        "date_of_birth": "1990-05-01",
        "nationality": "NL",
        "phone_country_code": "+31",
        "phone_number": "612345678",
        "id_document_type": "passport",
        "id_number": "NX1234567",
        "id_issuing_country": "NL",
        "id_expiry_date": "2030-01-01",
        "current_house_number": "12",
        "current_street_name": "Damrak",
        "current_city": "Amsterdam",
        "current_postal_code": "1012 AB",
        "current_country": "NL",
        # household
        "desired_move_in_date": "2026-03-01",
        "lease_duration_months": 12,
        "additional_occupants": 0,
        "has_pets": False,
        # financial
        "employment_status": "employed",
        "income_currency": "eur",
        "employer_name": "Acme B.V.",
        "job_title": "Engineer",
        "employment_type": "full_time",
        "employment_start_date": "2020-01-01",
        "gross_annual_income": 60000,
        "net_monthly_income": 3500,
        # history
        "authorize_credit_check": True,
        "current_living_situation": "renting",
        "current_address_move_in_date": "2022-06-01",
        "current_monthly_rent": 1200,
        "reason_for_moving": "end_of_lease",
        # consent
        "declaration_accuracy": True,
        "consent_screening": True,
        "consent_data_processing": True,
        "consent_reference_contact": True,
        "digital_signature": "Jan Jansen",
    }


@pytest.fixture
def make_ctx(today: date) -> Callable[..., ValidationContext]:
    """
    Build a ValidationContext snapshot for a submission.

    Usage:
        ctx = make_ctx(fields, entity_type=EntityType.GUARANTOR)
    """

    def _make(
        fields: dict[str, Any] | None = None,
        entity_type: EntityType = EntityType.TENANT,
        mode: SaveMode = SaveMode.STRICT,
        **kwargs: Any,
    ) -> ValidationContext:
        kwargs.setdefault("today", today)
        return ValidationContext.from_submission(
            fields or {}, entity_type=entity_type, mode=mode, **kwargs
        )

    return _make
