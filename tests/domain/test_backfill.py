"""
Tests for back-fill planning.
"""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from property_kernel.domain.backfill import plan_backfill, tenancy_months
from property_kernel.domain.values import Month


def _tenant(move_in, move_out=None, rent="800", persons=2):
    return SimpleNamespace(
        id=1,
        move_in_date=move_in,
        move_out_date=move_out,
        target_cold_rent=Decimal(rent),
        number_of_persons=persons,
    )


class TestTenancyMonths:
    def test_active_tenant_runs_to_today(self):
        months = tenancy_months(_tenant(date(2023, 1, 1)), date(2023, 4, 15))
        assert [str(m) for m in months] == ["2023-01", "2023-02", "2023-03", "2023-04"]

    def test_moved_out_tenant_stops_at_move_out(self):
        months = tenancy_months(
            _tenant(date(2022, 11, 15), date(2023, 2, 28)), date(2023, 6, 1)
        )
        assert [str(m) for m in months] == ["2022-11", "2022-12", "2023-01", "2023-02"]

    def test_future_move_out_extends_past_today(self):
        months = tenancy_months(_tenant(date(2023, 3, 1), date(2023, 6, 30)), date(2023, 4, 1))
        assert months[-1] == Month(2023, 6)

    def test_future_move_in_is_empty(self):
        assert tenancy_months(_tenant(date(2023, 5, 1)), date(2023, 4, 15)) == []

    def test_mid_month_move_in_counts_the_month(self):
        months = tenancy_months(_tenant(date(2023, 4, 30)), date(2023, 4, 1))
        assert months == [Month(2023, 4)]


class TestPlanBackfill:
    def test_plans_every_missing_month(self):
        plan = plan_backfill(_tenant(date(2023, 1, 1)), [], date(2023, 4, 15))
        assert [d.month_key for d in plan] == ["2023-01", "2023-02", "2023-03", "2023-04"]
        for draft in plan:
            assert draft.tenant_id == 1
            assert draft.target_cold_rent == Decimal("800")
            assert draft.persons == 2
            assert draft.paid_cold_rent == Decimal("0")
            assert draft.paid_ancillary == Decimal("0")
            assert draft.paid_electricity == Decimal("0")
            assert draft.extra_payments == Decimal("0")
            assert draft.note == ""
            assert draft.is_locked is False
            draft.validate()

    def test_skips_existing_months(self):
        plan = plan_backfill(
            _tenant(date(2023, 1, 1)), ["2023-02", Month(2023, 4)], date(2023, 4, 15)
        )
        assert [d.month_key for d in plan] == ["2023-01", "2023-03"]

    def test_nothing_missing_plans_nothing(self):
        existing = ["2023-01", "2023-02", "2023-03", "2023-04"]
        assert plan_backfill(_tenant(date(2023, 1, 1)), existing, date(2023, 4, 15)) == []

    def test_uses_current_targets(self):
        plan = plan_backfill(_tenant(date(2023, 4, 1), rent="950", persons=3), [], date(2023, 4, 2))
        assert plan[0].target_cold_rent == Decimal("950")
        assert plan[0].persons == 3
