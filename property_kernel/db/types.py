"""
Module: property_kernel.db.types
Responsibility: Column types for monetary amounts and year-month keys.
    Centralizes how amounts and months are stored so that every model uses
    identical definitions.
Architecture position: Kernel > DB.  May be imported by models/ and
    services/.  MUST NOT import from those layers.

Invariants enforced:
    - No floats for money.  Amounts are stored as canonical decimal text and
      read back as Decimal, so SQLite (which has no native decimal type)
      round-trips every value exactly.
    - Months are stored as 7-character ``YYYY-MM`` text; lexical order equals
      chronological order, which month-range queries rely on.

Failure modes:
    - TypeError on binding a float to an AmountText column.
"""

from decimal import Decimal

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class AmountText(TypeDecorator):
    """
    Decimal stored as text for exact round-trips on SQLite.

    Guarantees:
        - process_bind_param: Decimal/int/str -> normalized str on INSERT/UPDATE.
        - process_result_value: str -> Decimal on SELECT.
        - Floats are rejected outright.
    """

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Convert a Decimal to its fixed-point string form."""
        if value is None:
            return None
        if isinstance(value, float):
            raise TypeError("Amounts must be Decimal, not float")
        return format(Decimal(value), "f")

    def process_result_value(self, value, dialect):
        """Convert stored text back to Decimal."""
        if value is None:
            return None
        return Decimal(value)


class MonthText(TypeDecorator):
    """
    Year-month key stored as ``YYYY-MM`` text.

    Accepts either a string or any object whose ``str()`` is the canonical
    form (the domain ``Month`` value), so callers can bind typed months
    directly in queries.
    """

    impl = String(7)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Store the canonical string form."""
        if value is None:
            return None
        return str(value)
