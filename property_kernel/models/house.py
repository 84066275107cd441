"""
Module: property_kernel.models.house
Responsibility: ORM persistence for houses (buildings under management).
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced (service layer, via HouseDraft.validate):
    - name, street, number, country, zip_code and city are non-blank.
    - city is not purely numeric.
"""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from property_kernel.db.base import TrackedBase


class House(TrackedBase):
    """A building containing one or more apartments."""

    __tablename__ = "houses"

    __table_args__ = (
        Index("idx_house_name", "name"),
        {"sqlite_autoincrement": True},
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Address
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<House {self.id}: {self.name}>"
