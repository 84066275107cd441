"""
End-to-end tests through PropertyManagementApp.

Every facade call runs in its own session_scope against a SQLite file, so
these tests see exactly what was committed.  The clock starts on
15 April 2023.
"""

from datetime import date
from decimal import Decimal

import pytest

from property_config.schema import AppConfig, DatabaseConfig, PaymentsConfig
from property_kernel.exceptions import (
    InvalidAmountError,
    InvalidFieldError,
    InvalidPersonsError,
    TenantNotFoundError,
)
from property_kernel.services.payment_generation_service import (
    PaymentGenerationService,
)
from property_kernel.services.tenant_service import TenantService
from property_services.app import APP_NAME, PropertyManagementApp
from tests.conftest import tenant_draft


def _create_tenant(app, house, apartment, **overrides):
    fields = {
        "first_name": "Erika",
        "last_name": "Mustermann",
        "move_in_date": "2023-01-01",
        "move_out_date": "",
        "deposit": "1500",
        "email": "erika@example.com",
        "number_of_persons": "2",
        "target_cold_rent": "800",
        "target_ancillary_payment": "200",
        "target_electricity_payment": "50",
        "greeting": "",
        "house_id": house.id,
        "apartment_id": apartment.id,
    }
    fields.update(overrides)
    return app.create_tenant(**fields)


def _update_tenant(app, tenant, **overrides):
    fields = {
        "first_name": tenant.first_name,
        "last_name": tenant.last_name,
        "move_in_date": tenant.move_in_date.isoformat(),
        "move_out_date": "",
        "deposit": str(tenant.deposit),
        "email": tenant.email,
        "number_of_persons": str(tenant.number_of_persons),
        "target_cold_rent": str(tenant.target_cold_rent),
        "target_ancillary_payment": str(tenant.target_ancillary_payment),
        "target_electricity_payment": str(tenant.target_electricity_payment),
        "greeting": tenant.greeting,
        "house_id": tenant.house_id,
        "apartment_id": tenant.apartment_id,
    }
    fields.update(overrides)
    return app.update_tenant(tenant.id, **fields)


def _insert_tenant_without_records(app, house, apartment, **overrides):
    with app.database.session_scope() as session:
        return TenantService(session).create(tenant_draft(house.id, apartment.id, **overrides))


def _by_month(records):
    return {r.month: r for r in records}


class TestLifecycle:
    def test_from_config_opens_file_and_shuts_down(self, tmp_path, deterministic_clock):
        config = AppConfig(database=DatabaseConfig(path=str(tmp_path / "data" / "pm.db")))
        app = PropertyManagementApp.from_config(config, clock=deterministic_clock)

        assert app.startup() == []
        assert (tmp_path / "data" / "pm.db").exists()
        assert app.get_all_houses() == []

        app.shutdown()
        assert not app.database.is_open

    def test_app_info(self, app):
        info = app.get_app_info()
        assert info["name"] == APP_NAME
        assert info["version"]

    def test_last_twelve_months(self, app):
        months = app.get_last_twelve_months()
        assert months[0] == "2022-05"
        assert months[-1] == "2023-04"


class TestStartupBackfill:
    def test_fills_missing_records(self, seeded_app, captured_logs):
        app, house, apartment = seeded_app
        tenant = _insert_tenant_without_records(app, house, apartment)

        outcomes = app.startup()

        assert [(o.tenant_id, o.value) for o in outcomes] == [(tenant.id, 4)]
        assert len(app.get_payment_records_by_tenant_id(tenant.id)) == 4
        completed = [r for r in captured_logs() if r["message"] == "backfill_run_completed"]
        assert completed[-1]["inserted"] == 4
        assert completed[-1]["failed_tenants"] == []

    def test_second_startup_inserts_nothing(self, seeded_app):
        app, house, apartment = seeded_app
        _insert_tenant_without_records(app, house, apartment)
        app.startup()
        assert [o.value for o in app.startup()] == [0]

    def test_skips_moved_out_tenants(self, seeded_app):
        app, house, apartment = seeded_app
        _insert_tenant_without_records(
            app, house, apartment, move_out_date=date(2023, 3, 31)
        )
        assert app.startup() == []

    def test_one_failing_tenant_does_not_stop_the_rest(
        self, seeded_app, monkeypatch, captured_logs
    ):
        app, house, apartment = seeded_app
        good = _insert_tenant_without_records(app, house, apartment, last_name="Good")
        bad = _insert_tenant_without_records(app, house, apartment, last_name="Bad")
        original = PaymentGenerationService.generate_for_tenant

        def flaky(self, tenant_id):
            if tenant_id == bad.id:
                raise RuntimeError("disk full")
            return original(self, tenant_id)

        monkeypatch.setattr(PaymentGenerationService, "generate_for_tenant", flaky)

        outcomes = {o.tenant_id: o for o in app.startup()}

        assert outcomes[good.id].ok and outcomes[good.id].value == 4
        assert not outcomes[bad.id].ok
        assert app.get_payment_records_by_tenant_id(bad.id) == []
        logs = captured_logs()
        failed = [r for r in logs if r["message"] == "backfill_tenant_failed"]
        assert failed[0]["tenant_id"] == bad.id
        assert failed[0]["exc_message"] == "disk full"
        completed = [r for r in logs if r["message"] == "backfill_run_completed"]
        assert completed[-1]["failed_tenants"] == [bad.id]


class TestTenants:
    def test_create_generates_records(self, seeded_app):
        app, house, apartment = seeded_app
        tenant = _create_tenant(app, house, apartment)
        months = [r.month for r in app.get_payment_records_by_tenant_id(tenant.id)]
        assert months == ["2023-04", "2023-03", "2023-02", "2023-01"]

    def test_create_keeps_tenant_when_generation_fails(
        self, seeded_app, monkeypatch, captured_logs
    ):
        app, house, apartment = seeded_app

        def broken(self, tenant_id):
            raise RuntimeError("generation broke")

        monkeypatch.setattr(PaymentGenerationService, "generate_for_tenant", broken)
        tenant = _create_tenant(app, house, apartment)

        assert app.get_tenant_by_id(tenant.id).id == tenant.id
        assert app.get_payment_records_by_tenant_id(tenant.id) == []
        failed = [r for r in captured_logs() if r["message"] == "payment_generation_failed"]
        assert failed[0]["tenant_id"] == tenant.id

        monkeypatch.undo()
        app.startup()
        assert len(app.get_payment_records_by_tenant_id(tenant.id)) == 4

    def test_invalid_input_creates_nothing(self, seeded_app):
        app, house, apartment = seeded_app
        with pytest.raises(InvalidPersonsError):
            _create_tenant(app, house, apartment, number_of_persons="0")
        assert app.get_all_tenants() == []

    def test_current_tenants(self, seeded_app):
        app, house, apartment = seeded_app
        current = _create_tenant(app, house, apartment, last_name="Current")
        _create_tenant(app, house, apartment, last_name="Former", move_out_date="2023-03-01")
        assert [t.id for t in app.get_current_tenants_by_house_id(house.id)] == [current.id]
        assert len(app.get_tenants_by_house_id(house.id)) == 2
        assert len(app.get_tenants_by_apartment_id(apartment.id)) == 2

    def test_delete_keeps_payment_records(self, seeded_app):
        app, house, apartment = seeded_app
        tenant = _create_tenant(app, house, apartment)
        app.delete_tenant(tenant.id)

        with pytest.raises(TenantNotFoundError):
            app.get_tenant_by_id(tenant.id)
        assert len(app.get_payment_records_by_tenant_id(tenant.id)) == 4

    def test_new_tenant_never_reuses_a_deleted_tenant_id(self, seeded_app):
        app, house, apartment = seeded_app
        old = _create_tenant(app, house, apartment, first_name="Old")
        app.delete_tenant(old.id)

        new = _create_tenant(
            app, house, apartment, first_name="New", move_in_date="2023-03-01"
        )

        assert new.id != old.id
        months = [r.month for r in app.get_payment_records_by_tenant_id(new.id)]
        assert months == ["2023-04", "2023-03"]
        assert len(app.get_payment_records_by_tenant_id(old.id)) == 4


class TestTenantChangePropagation:
    def test_rent_change_reaches_open_records_from_current_month(
        self, seeded_app, deterministic_clock
    ):
        app, house, apartment = seeded_app
        tenant = _create_tenant(app, house, apartment)
        march = app.get_payment_record_by_tenant_and_month(tenant.id, "2023-03")
        app.toggle_payment_record_lock(march.id)

        deterministic_clock.set_date(date(2023, 2, 10))
        _update_tenant(app, tenant, target_cold_rent="900")

        records = _by_month(app.get_payment_records_by_tenant_id(tenant.id))
        assert records["2023-01"].target_cold_rent == Decimal("800")
        assert records["2023-02"].target_cold_rent == Decimal("900")
        assert records["2023-03"].target_cold_rent == Decimal("800")
        assert records["2023-04"].target_cold_rent == Decimal("900")
        assert app.get_tenant_by_id(tenant.id).target_cold_rent == Decimal("900")

    def test_persons_change(self, seeded_app):
        app, house, apartment = seeded_app
        tenant = _create_tenant(app, house, apartment)
        _update_tenant(app, tenant, number_of_persons="3")

        records = _by_month(app.get_payment_records_by_tenant_id(tenant.id))
        assert records["2023-03"].persons == 2
        assert records["2023-04"].persons == 3

    def test_unchanged_targets_leave_records_alone(self, seeded_app, captured_logs):
        app, house, apartment = seeded_app
        tenant = _create_tenant(app, house, apartment)
        _update_tenant(app, tenant, greeting="Hello")
        messages = {r["message"] for r in captured_logs()}
        assert "target_cold_rent_propagated" not in messages
        assert "persons_propagated" not in messages


class TestPaymentRecords:
    @pytest.fixture
    def tenant(self, seeded_app):
        app, house, apartment = seeded_app
        return _create_tenant(app, house, apartment)

    def test_update_respects_lock(self, seeded_app, tenant):
        app = seeded_app[0]
        jan = app.get_payment_record_by_tenant_and_month(tenant.id, "2023-01")

        paid = app.update_payment_record(jan.id, "800", "200", "50", "0", "2", "", True)
        assert paid.total_paid == Decimal("1050")
        assert paid.is_locked

        kept = app.update_payment_record(jan.id, "0", "0", "0", "0", "5", "typo?", True)
        assert kept.total_paid == Decimal("1050")
        assert kept.persons == 2
        assert kept.note == "typo?"

        unlocked = app.update_payment_record(jan.id, "750", "200", "50", "0", "2", "", False)
        assert unlocked.paid_cold_rent == Decimal("750")

    def test_update_rejects_bad_amount(self, seeded_app, tenant):
        app = seeded_app[0]
        jan = app.get_payment_record_by_tenant_and_month(tenant.id, "2023-01")
        with pytest.raises(InvalidAmountError):
            app.update_payment_record(jan.id, "abc", "0", "0", "0", "2", "", False)
        assert app.get_payment_record_by_id(jan.id).paid_cold_rent == Decimal("0")

    def test_create_and_delete(self, seeded_app, tenant):
        app = seeded_app[0]
        may = app.create_payment_record(
            tenant.id, "2023-05", "800", "800", "200", "50", "", "2", "paid early"
        )
        assert may.note == "paid early"
        app.delete_payment_record(may.id)
        assert len(app.get_payment_records_by_tenant_id(tenant.id)) == 4

    def test_month_range_and_recent(self, seeded_app, tenant):
        app = seeded_app[0]
        window = app.get_payment_records_for_month_range(tenant.id, "2023-02", "2023-03")
        assert [r.month for r in window] == ["2023-02", "2023-03"]
        recent = app.get_recent_payment_records_by_tenant_id(tenant.id)
        assert [r.month for r in recent] == ["2023-01", "2023-02", "2023-03", "2023-04"]

    def test_review_window_from_config(self, database, deterministic_clock, seeded_app, tenant):
        narrow = PropertyManagementApp(
            database,
            clock=deterministic_clock,
            config=AppConfig(payments=PaymentsConfig(review_window_months=2)),
        )
        recent = narrow.get_recent_payment_records_by_tenant_id(tenant.id)
        assert [r.month for r in recent] == ["2023-03", "2023-04"]

    def test_note_and_lock_shortcuts(self, seeded_app, tenant):
        app = seeded_app[0]
        feb = app.get_payment_record_by_tenant_and_month(tenant.id, "2023-02")
        assert app.toggle_payment_record_lock(feb.id).is_locked
        noted = app.update_payment_record_note(feb.id, "reminder sent")
        assert noted.note == "reminder sent"
        assert noted.is_locked

    def test_house_view(self, seeded_app, tenant):
        app, house, _ = seeded_app
        by_tenant = app.get_payment_records_for_house(house.id)
        assert list(by_tenant) == [tenant.id]
        assert len(by_tenant[tenant.id]) == 4


class TestBatchSave:
    @pytest.fixture
    def tenant(self, seeded_app):
        app, house, apartment = seeded_app
        return _create_tenant(app, house, apartment)

    def _row(self, tenant_id, month, **overrides):
        row = {
            "tenant_id": tenant_id,
            "month": month,
            "target_cold_rent": "800",
            "paid_cold_rent": "800",
            "paid_ancillary": "200",
            "paid_electricity": "50",
            "extra_payments": "0",
            "persons": "2",
        }
        row.update(overrides)
        return row

    def test_saves_mappings(self, seeded_app, tenant):
        app = seeded_app[0]
        saved = app.batch_save_payment_records(
            [self._row(tenant.id, "2023-01"), self._row(tenant.id, "2023-05", is_locked=True)]
        )
        assert [r.month for r in saved] == ["2023-01", "2023-05"]
        assert saved[0].paid_cold_rent == Decimal("800")
        assert saved[1].is_locked
        assert len(app.get_payment_records_by_tenant_id(tenant.id)) == 5

    def test_failure_rolls_back_everything(self, seeded_app, tenant):
        app = seeded_app[0]
        with pytest.raises(TenantNotFoundError):
            app.batch_save_payment_records(
                [
                    self._row(tenant.id, "2023-01"),
                    self._row(tenant.id, "2023-05"),
                    self._row(9999, "2023-05"),
                ]
            )
        records = _by_month(app.get_payment_records_by_tenant_id(tenant.id))
        assert "2023-05" not in records
        assert records["2023-01"].paid_cold_rent == Decimal("0")

    def test_invalid_row_rejects_batch(self, seeded_app, tenant):
        app = seeded_app[0]
        with pytest.raises(InvalidPersonsError):
            app.batch_save_payment_records(
                [self._row(tenant.id, "2023-05"), self._row(tenant.id, "2023-06", persons="0")]
            )
        assert len(app.get_payment_records_by_tenant_id(tenant.id)) == 4

    def test_missing_keys(self, seeded_app, tenant):
        app = seeded_app[0]
        row = self._row(tenant.id, "2023-05")
        del row["persons"]
        with pytest.raises(InvalidFieldError):
            app.batch_save_payment_records([row])
