"""
Backfill -- Which monthly records a tenant should have, and which are missing.

Responsibility:
    Pure planning half of payment-record generation.  Given a tenant's
    tenancy span and the months already on file, produces the drafts to
    insert.  The service layer does the lookups and the inserts.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Span runs from the move-in month to the move-out month if set,
      otherwise to the month of ``today``; inclusive, ascending.
    - Existing months are never planned again, so re-running is a no-op.
    - Planned drafts carry zero paid amounts, an empty note, are unlocked,
      and snapshot the tenant's current target cold rent and persons.

Failure modes:
    - None.  A move-in after the end of the span yields an empty plan.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Protocol

from property_kernel.domain.dtos import PaymentRecordDraft
from property_kernel.domain.months import iter_months
from property_kernel.domain.values import Month


class Tenancy(Protocol):
    """The tenant fields the planner reads."""

    id: int
    move_in_date: date
    move_out_date: date | None
    target_cold_rent: Decimal
    number_of_persons: int


def tenancy_months(tenant: Tenancy, today: date) -> list[Month]:
    """Every month of the tenancy up to move-out or ``today``, ascending."""
    start = Month.of(tenant.move_in_date)
    if tenant.move_out_date is not None:
        end = Month.of(tenant.move_out_date)
    else:
        end = Month.of(today)
    if start > end:
        return []
    return list(iter_months(start, end))


def plan_backfill(
    tenant: Tenancy,
    existing_months: Iterable[Month | str],
    today: date,
) -> list[PaymentRecordDraft]:
    """Drafts for every tenancy month that has no record yet."""
    existing = {Month.coerce(m) for m in existing_months}
    return [
        PaymentRecordDraft(
            tenant_id=tenant.id,
            month=month,
            target_cold_rent=tenant.target_cold_rent,
            paid_cold_rent=Decimal("0"),
            paid_ancillary=Decimal("0"),
            paid_electricity=Decimal("0"),
            extra_payments=Decimal("0"),
            persons=tenant.number_of_persons,
            note="",
            is_locked=False,
        )
        for month in tenancy_months(tenant, today)
        if month not in existing
    ]
