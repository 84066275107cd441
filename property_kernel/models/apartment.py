"""
Module: property_kernel.models.apartment
Responsibility: ORM persistence for apartments within a house.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - house_id references houses.id (no cascade; deleting a house is a
      plain delete of the house row).
    - size > 0 (service layer, via ApartmentDraft.validate).
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from property_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from property_kernel.models.house import House


class Apartment(TrackedBase):
    """A rentable unit inside a house."""

    __tablename__ = "apartments"

    __table_args__ = (
        Index("idx_apartment_house", "house_id"),
        {"sqlite_autoincrement": True},
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    house_id: Mapped[int] = mapped_column(
        ForeignKey("houses.id"),
        nullable=False,
    )

    # Size in square metres
    size: Mapped[Decimal] = mapped_column(nullable=False)

    house: Mapped["House"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<Apartment {self.id}: {self.name} ({self.size} m2)>"
