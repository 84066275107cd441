"""
Module: property_kernel.models.payment_record
Responsibility: ORM persistence for monthly payment records, one row per
    (tenant, calendar month).
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - uq_payment_record_tenant_month: at most one record per (tenant, month).
    - month is canonical ``YYYY-MM`` text (MonthText).
    - Amounts >= 0 and persons > 0 (service layer, via
      PaymentRecordDraft.validate before every write).
    - When is_locked, the paid amounts and persons change only through an
      explicit unlock (service layer, via apply_lock_rule).

Failure modes:
    - IntegrityError on a duplicate (tenant_id, month) that bypassed the
      service-level DuplicateRecordError check.
"""

from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Index, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from property_kernel.db.base import TrackedBase
from property_kernel.db.types import MonthText


class PaymentRecord(TrackedBase):
    """
    Target vs. paid amounts for one tenant in one month.

    Guarantees:
        - target_cold_rent and persons are snapshots taken when the record
          was generated (or later propagated), not live tenant values.
        - The foreign key to tenants has no cascade; records outlive a
          deleted tenant.
    """

    __tablename__ = "payment_records"

    __table_args__ = (
        UniqueConstraint("tenant_id", "month", name="uq_payment_record_tenant_month"),
        Index("idx_payment_record_tenant", "tenant_id"),
        Index("idx_payment_record_month", "month"),
        {"sqlite_autoincrement": True},
    )

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
    )

    month: Mapped[str] = mapped_column(MonthText(), nullable=False)

    target_cold_rent: Mapped[Decimal] = mapped_column(nullable=False)

    paid_cold_rent: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    paid_ancillary: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    paid_electricity: Mapped[Decimal] = mapped_column(
        nullable=False, default=Decimal("0")
    )
    extra_payments: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    persons: Mapped[int] = mapped_column(nullable=False)

    note: Mapped[str] = mapped_column(Text, nullable=False, default="")

    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        lock = " locked" if self.is_locked else ""
        return f"<PaymentRecord {self.id}: tenant {self.tenant_id} {self.month}{lock}>"
