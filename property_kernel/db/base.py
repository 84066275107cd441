"""
Module: property_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the integer primary key convention, the type annotation map for consistent
    column types, and the TrackedBase mixin for audit timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - Integer autoincrement primary keys.  SQLite only aliases ROWID for a
      column declared exactly INTEGER PRIMARY KEY, so ids map to Integer,
      never BigInteger.  Every table sets sqlite_autoincrement so ids of
      deleted rows are never handed out again.
    - Decimal amounts map to AmountText (exact text storage, never float).
    - Audit timestamps: TrackedBase provides created_at and updated_at.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import Date, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from property_kernel.db.types import AmountText


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is an autoincrement INTEGER PRIMARY KEY.
        - Decimal maps to AmountText.
        - date maps to Date, datetime to DateTime.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: AmountText(),
        date: Date(),
        datetime: DateTime(),
        int: Integer(),
    }

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )


class TrackedBase(Base):
    """
    Abstract base with audit timestamps.

    Guarantees:
        - created_at is set by the database on INSERT and never changes.
        - updated_at is set on INSERT and refreshed on every UPDATE.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
