"""
Pytest fixtures for the property kernel test suite.

Each test gets its own SQLite file under ``tmp_path`` with all tables
created, a DeterministicClock fixed on 15 April 2023, and services bound to
one session.  Builders create houses, apartments and tenants through the
services so that every row in a test went through validation.
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest
from sqlalchemy.orm import Session

from property_config.schema import AppConfig
from property_kernel.db.engine import Database
from property_kernel.domain.clock import DeterministicClock
from property_kernel.domain.dtos import ApartmentDraft, HouseDraft, TenantDraft
from property_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from property_kernel.selectors.payment_record_selector import PaymentRecordSelector
from property_kernel.services.apartment_service import ApartmentService
from property_kernel.services.house_service import HouseService
from property_kernel.services.payment_generation_service import (
    PaymentGenerationService,
)
from property_kernel.services.payment_record_service import PaymentRecordService
from property_kernel.services.tenant_service import TenantService
from property_services.app import PropertyManagementApp

TODAY = date(2023, 4, 15)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture property_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, app):
            app.startup()
            logs = captured_logs()
            assert any(r["message"] == "backfill_run_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("property_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def database(tmp_path):
    """A fresh SQLite database file with all tables created."""
    db = Database.from_path(tmp_path / "property_management.db")
    db.create_tables()
    yield db
    db.close()


@pytest.fixture
def session(database) -> Session:
    """A session on the test database; closed (uncommitted work dropped) at teardown."""
    s = database.session()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def deterministic_clock():
    """Clock fixed at noon UTC on 15 April 2023."""
    return DeterministicClock.on(TODAY)


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def house_service(session, deterministic_clock):
    return HouseService(session, deterministic_clock)


@pytest.fixture
def apartment_service(session, deterministic_clock):
    return ApartmentService(session, deterministic_clock)


@pytest.fixture
def tenant_service(session, deterministic_clock):
    return TenantService(session, deterministic_clock)


@pytest.fixture
def payment_record_service(session, deterministic_clock):
    return PaymentRecordService(session, deterministic_clock)


@pytest.fixture
def generation_service(session, deterministic_clock):
    return PaymentGenerationService(session, deterministic_clock)


@pytest.fixture
def payment_selector(session, deterministic_clock):
    return PaymentRecordSelector(session, deterministic_clock)


@pytest.fixture
def app(database, deterministic_clock):
    """Facade on the test database with default configuration."""
    return PropertyManagementApp(database, clock=deterministic_clock, config=AppConfig())


# =============================================================================
# Builders
# =============================================================================


def house_draft(**overrides) -> HouseDraft:
    fields = {
        "name": "Lindenhof",
        "street": "Lindenstrasse",
        "number": "12a",
        "country": "Germany",
        "zip_code": "10115",
        "city": "Berlin",
    }
    fields.update(overrides)
    return HouseDraft(**fields)


def tenant_draft(house_id: int, apartment_id: int, **overrides) -> TenantDraft:
    fields = {
        "first_name": "Erika",
        "last_name": "Mustermann",
        "move_in_date": date(2023, 1, 1),
        "move_out_date": None,
        "deposit": Decimal("1500"),
        "email": "erika@example.com",
        "number_of_persons": 2,
        "target_cold_rent": Decimal("800"),
        "target_ancillary_payment": Decimal("200"),
        "target_electricity_payment": Decimal("50"),
        "greeting": "Dear Ms Mustermann",
        "house_id": house_id,
        "apartment_id": apartment_id,
    }
    fields.update(overrides)
    return TenantDraft(**fields)


@pytest.fixture
def house(house_service):
    return house_service.create(house_draft())


@pytest.fixture
def apartment(apartment_service, house):
    return apartment_service.create(
        ApartmentDraft(name="1st floor left", house_id=house.id, size=Decimal("72.5"))
    )


@pytest.fixture
def make_tenant(tenant_service, house, apartment):
    """Factory creating tenants in the default house and apartment."""

    def _make(**overrides):
        return tenant_service.create(tenant_draft(house.id, apartment.id, **overrides))

    return _make


@pytest.fixture
def tenant(make_tenant):
    """Tenant who moved in on 1 January 2023, still living there."""
    return make_tenant()


@pytest.fixture
def seeded_app(app):
    """
    Facade with one house, one apartment and no tenants.

    Returns (app, house, apartment).
    """
    h = app.create_house("Lindenhof", "Lindenstrasse", "12a", "Germany", "10115", "Berlin")
    a = app.create_apartment("1st floor left", h.id, "72,5")
    return app, h, a
