"""
Module: property_kernel.models.tenant
Responsibility: ORM persistence for tenants occupying an apartment.
    A tenant row is the source of the target amounts and person count that
    are snapshotted onto generated payment records.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced (service layer, via TenantDraft.validate):
    - move_out_date, when set, is strictly after move_in_date.
    - number_of_persons > 0; target amounts > 0; deposit >= 0.
    - The apartment belongs to the tenant's house.

Audit relevance:
    Deleting a tenant does not delete its payment records; the history is
    retained (payment_records.tenant_id has no ON DELETE CASCADE).
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, or_
from sqlalchemy.orm import Mapped, mapped_column, relationship

from property_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from property_kernel.models.apartment import Apartment
    from property_kernel.models.house import House


class Tenant(TrackedBase):
    """An occupant of one apartment in one house."""

    __tablename__ = "tenants"

    __table_args__ = (
        Index("idx_tenant_house", "house_id"),
        Index("idx_tenant_apartment", "apartment_id"),
        Index("idx_tenant_move_out", "move_out_date"),
        {"sqlite_autoincrement": True},
    )

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Tenancy span
    move_in_date: Mapped[date] = mapped_column(nullable=False)
    move_out_date: Mapped[date | None] = mapped_column(nullable=True)

    deposit: Mapped[Decimal] = mapped_column(nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    number_of_persons: Mapped[int] = mapped_column(nullable=False)

    # Contractual monthly targets
    target_cold_rent: Mapped[Decimal] = mapped_column(nullable=False)
    target_ancillary_payment: Mapped[Decimal] = mapped_column(nullable=False)
    target_electricity_payment: Mapped[Decimal] = mapped_column(nullable=False)

    # Salutation used in letters
    greeting: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    house_id: Mapped[int] = mapped_column(ForeignKey("houses.id"), nullable=False)
    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id"), nullable=False
    )

    house: Mapped["House"] = relationship(lazy="joined")
    apartment: Mapped["Apartment"] = relationship(lazy="joined")

    @classmethod
    def active_on(cls, as_of: date):
        """SQL filter: no move-out date, or a move-out date after ``as_of``."""
        return or_(cls.move_out_date.is_(None), cls.move_out_date > as_of)

    def __repr__(self) -> str:
        return f"<Tenant {self.id}: {self.last_name}, {self.first_name}>"
