"""
Module: property_kernel.selectors.payment_record_selector
Responsibility: Read-only payment views for the review screens: the last N
    months of a tenant, an explicit month range, and the house-level view of
    every current tenant.
Architecture position: Kernel > Selectors.  Read-only; returns
    PaymentRecordInfo / TenantOutcome DTOs.

Invariants enforced:
    - Results are ordered by month ascending.
    - The house-level view is best-effort: a tenant whose records cannot be
      read is reported as a failed TenantOutcome and logged, never raised.

Failure modes:
    - InvalidMonthFormatError / InvalidRangeError for bad range bounds.
    - InvalidRangeError for a non-positive count.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from property_kernel.domain.dtos import PaymentRecordInfo, TenantOutcome
from property_kernel.domain.values import Month
from property_kernel.exceptions import InvalidRangeError
from property_kernel.logging_config import get_logger
from property_kernel.models.payment_record import PaymentRecord
from property_kernel.models.tenant import Tenant
from property_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.payment_record")

DEFAULT_REVIEW_WINDOW = 12


class PaymentRecordSelector(BaseSelector[PaymentRecord]):
    """Selector for payment record review queries."""

    def recent_for_tenant(
        self, tenant_id: int, count: int = DEFAULT_REVIEW_WINDOW
    ) -> list[PaymentRecordInfo]:
        """
        The ``count`` most recent records of a tenant, oldest first.

        Takes the newest ``count`` rows by month, then re-orders them
        ascending for display.
        """
        if count < 1:
            raise InvalidRangeError(
                "", "", reason=f"number of months must be at least 1, got {count}"
            )
        stmt = (
            select(PaymentRecord)
            .where(PaymentRecord.tenant_id == tenant_id)
            .order_by(PaymentRecord.month.desc())
            .limit(count)
        )
        newest_first = self.session.execute(stmt).scalars().all()
        return [PaymentRecordInfo.from_model(r) for r in reversed(newest_first)]

    def for_month_range(
        self, tenant_id: int, start: Month | str, end: Month | str
    ) -> list[PaymentRecordInfo]:
        """
        Records of a tenant between two months inclusive, ascending.

        Raises:
            InvalidMonthFormatError: If a bound does not parse.
            InvalidRangeError: If end precedes start.
        """
        start_month = Month.coerce(start, field="start_month")
        end_month = Month.coerce(end, field="end_month")
        if end_month < start_month:
            raise InvalidRangeError(str(start_month), str(end_month))

        stmt = (
            select(PaymentRecord)
            .where(
                PaymentRecord.tenant_id == tenant_id,
                PaymentRecord.month >= str(start_month),
                PaymentRecord.month <= str(end_month),
            )
            .order_by(PaymentRecord.month.asc())
        )
        return [
            PaymentRecordInfo.from_model(r)
            for r in self.session.execute(stmt).scalars().all()
        ]

    def current_tenants_payments_for_house(
        self,
        house_id: int,
        as_of: date | None = None,
        count: int = DEFAULT_REVIEW_WINDOW,
    ) -> list[TenantOutcome]:
        """
        Recent records of every tenant of a house who is active ``as_of``.

        Returns:
            One TenantOutcome per active tenant, in tenant name order.  A
            successful outcome's value is that tenant's list of records.
        """
        as_of = as_of or self._clock.today()
        stmt = (
            select(Tenant.id)
            .where(Tenant.house_id == house_id, Tenant.active_on(as_of))
            .order_by(Tenant.last_name, Tenant.first_name, Tenant.id)
        )
        tenant_ids = list(self.session.execute(stmt).scalars().all())

        outcomes: list[TenantOutcome] = []
        for tenant_id in tenant_ids:
            try:
                records = self.recent_for_tenant(tenant_id, count)
            except Exception as exc:
                logger.warning(
                    "house_payments_tenant_skipped",
                    extra={"house_id": house_id, "tenant_id": tenant_id},
                    exc_info=True,
                )
                outcomes.append(TenantOutcome.failure(tenant_id, exc))
                continue
            outcomes.append(TenantOutcome.success(tenant_id, records))
        return outcomes
