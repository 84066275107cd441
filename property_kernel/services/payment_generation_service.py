"""
PaymentGenerationService -- Back-fill of missing monthly payment records.

Responsibility:
    Ensures a contiguous series of monthly records exists for a tenant over
    the tenancy span, without duplicating or disturbing existing rows.  The
    plan is computed by ``plan_backfill``; this service does the lookups and
    inserts.

Architecture position:
    Kernel > Services -- imperative shell, flush-only.
    Called from two sites in the facade: after tenant creation, and at
    startup for every active tenant (one transaction per tenant).

Invariants enforced:
    - Idempotent: a second run for the same tenant and month inserts nothing.
    - Per-tenant atomicity comes from the caller's session_scope; a failure
      part-way leaves no new rows for that tenant once rolled back.

Failure modes:
    - TenantNotFoundError if the tenant does not exist.
    - ValidationError if the tenant's stored targets cannot form a valid
      record (e.g. a non-positive person count written around the service).
"""

from __future__ import annotations

from property_kernel.domain.backfill import plan_backfill
from property_kernel.domain.dtos import PaymentRecordInfo
from property_kernel.exceptions import TenantNotFoundError
from property_kernel.logging_config import LogContext, get_logger
from property_kernel.models.tenant import Tenant
from property_kernel.services.base import BaseService
from property_kernel.services.payment_record_service import PaymentRecordService

logger = get_logger("services.payment_generation")


class PaymentGenerationService(BaseService[Tenant]):
    """
    Generates missing payment records for one tenant at a time.

    Contract:
        "Now" is the injected clock's today; the span ends at the move-out
        month when one is set, otherwise at the current month.
    """

    def _records(self) -> PaymentRecordService:
        return PaymentRecordService(self.session, self._clock)

    def generate_for_tenant(self, tenant_id: int) -> list[PaymentRecordInfo]:
        """
        Insert a record for every tenancy month that has none yet.

        Returns:
            The inserted records, oldest month first.  Empty when nothing
            was missing.

        Raises:
            TenantNotFoundError: If the tenant doesn't exist.
        """
        tenant = self.session.get(Tenant, tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)

        records = self._records()
        today = self._clock.today()
        with LogContext.bind(operation="generate_payment_records", tenant_id=tenant_id):
            plan = plan_backfill(tenant, records.existing_months(tenant_id), today)
            created = [records.create(draft) for draft in plan]
            logger.info(
                "backfill_completed",
                extra={
                    "as_of": today,
                    "inserted": len(created),
                    "first_month": created[0].month if created else None,
                    "last_month": created[-1].month if created else None,
                },
            )
        return created
