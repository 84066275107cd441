"""
Pure domain layer.

This module contains value types, data transfer objects and the payment
record rules (month ranges, back-fill planning, lock rule) with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

Time enters only through an injected Clock.
"""

from property_kernel.domain.backfill import plan_backfill, tenancy_months
from property_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from property_kernel.domain.dtos import (
    ApartmentDraft,
    ApartmentInfo,
    HouseDraft,
    HouseInfo,
    PaymentRecordDraft,
    PaymentRecordInfo,
    TenantDraft,
    TenantInfo,
    TenantOutcome,
)
from property_kernel.domain.months import current_month, last_n_months, months_range
from property_kernel.domain.payment_lock import LOCK_FROZEN_FIELDS, apply_lock_rule
from property_kernel.domain.values import (
    Month,
    parse_amount,
    parse_date,
    parse_optional_date,
    parse_persons,
    parse_positive_amount,
)

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # Values
    "Month",
    "parse_amount",
    "parse_positive_amount",
    "parse_persons",
    "parse_date",
    "parse_optional_date",
    # Months
    "months_range",
    "last_n_months",
    "current_month",
    # DTOs
    "HouseDraft",
    "HouseInfo",
    "ApartmentDraft",
    "ApartmentInfo",
    "TenantDraft",
    "TenantInfo",
    "PaymentRecordDraft",
    "PaymentRecordInfo",
    "TenantOutcome",
    # Rules
    "LOCK_FROZEN_FIELDS",
    "apply_lock_rule",
    "tenancy_months",
    "plan_backfill",
]
