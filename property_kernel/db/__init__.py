"""Database layer - engine handle, base classes, column types."""

from property_kernel.db.base import Base, TrackedBase
from property_kernel.db.engine import Database, sqlite_url
from property_kernel.db.types import AmountText, MonthText

__all__ = [
    "Database",
    "sqlite_url",
    "Base",
    "TrackedBase",
    "AmountText",
    "MonthText",
]
