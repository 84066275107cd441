"""
Values -- Validated boundary types for months, amounts, persons and dates.

Responsibility:
    Parses the raw strings the UI sends (``"2023-01"``, ``"800,50"``, ``"2"``,
    ``"2023-01-15"``) into typed values exactly once, at the boundary.  Past
    this module, months are ``Month`` objects, money is ``Decimal`` and person
    counts are ``int``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module, by services and by the facade.

Invariants enforced:
    - A Month always has 1 <= month <= 12 and a four-digit year.
    - Parsed amounts are finite and non-negative (positive for the
      ``parse_positive_amount`` variant).  Never float.
    - Parsed person counts are positive integers.

Failure modes:
    - InvalidMonthFormatError for anything other than ``YYYY-MM``.
    - InvalidAmountError for unparseable, non-finite or negative amounts.
    - InvalidPersonsError for non-integer or non-positive person counts.
    - InvalidDateFormatError for anything other than ``YYYY-MM-DD``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from property_kernel.exceptions import (
    InvalidAmountError,
    InvalidDateFormatError,
    InvalidMonthFormatError,
    InvalidPersonsError,
)

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_PERSONS_RE = re.compile(r"^[+-]?\d+$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True, slots=True, order=True)
class Month:
    """
    Calendar year-month value object.

    Contract:
        Built through ``parse()`` from ``YYYY-MM`` text or through ``of()``
        from a date.  Direct construction is validated as well.

    Guarantees:
        - Immutable, hashable and totally ordered (year first, then month).
        - ``str(month)`` is the canonical ``YYYY-MM`` form used for storage.

    Non-goals:
        - Does NOT carry a day or a timezone.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12 or not 1 <= self.year <= 9999:
            raise InvalidMonthFormatError(f"{self.year:04d}-{self.month:02d}")

    @classmethod
    def parse(cls, text: str, field: str = "month") -> Month:
        """
        Parse canonical ``YYYY-MM`` text.

        Raises:
            InvalidMonthFormatError: If the text does not match ``YYYY-MM``
                or the month is outside 01-12.
        """
        if not isinstance(text, str):
            raise InvalidMonthFormatError(str(text), field=field)
        match = _MONTH_RE.match(text)
        if match is None:
            raise InvalidMonthFormatError(text, field=field)
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12 or year < 1:
            raise InvalidMonthFormatError(text, field=field)
        return cls(year, month)

    @classmethod
    def coerce(cls, value: Month | str, field: str = "month") -> Month:
        """Return ``value`` unchanged if already a Month, else parse it."""
        if isinstance(value, Month):
            return value
        return cls.parse(value, field=field)

    @classmethod
    def of(cls, day: date) -> Month:
        """The calendar month containing ``day``."""
        return cls(day.year, day.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def next(self) -> Month:
        if self.month == 12:
            return Month(self.year + 1, 1)
        return Month(self.year, self.month + 1)

    def previous(self) -> Month:
        if self.month == 1:
            return Month(self.year - 1, 12)
        return Month(self.year, self.month - 1)

    def shift(self, months: int) -> Month:
        """Move forward (or backward, for negative values) by whole months."""
        index = self.year * 12 + (self.month - 1) + months
        return Month(index // 12, index % 12 + 1)

    def months_until(self, other: Month) -> int:
        """Signed number of months from ``self`` to ``other``."""
        return (other.year - self.year) * 12 + (other.month - self.month)

    def display(self) -> str:
        """Long form, e.g. ``September 2024``."""
        return f"{_MONTH_NAMES[self.month - 1]} {self.year}"

    def short_display(self) -> str:
        """Short form, e.g. ``09.2024``."""
        return f"{self.month:02d}.{self.year:04d}"

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def parse_amount(text: str | Decimal | int | None, field: str = "amount") -> Decimal:
    """
    Parse a non-negative monetary amount.

    Accepts ``.`` or ``,`` as decimal separator and surrounding whitespace.
    An empty (or whitespace-only) string is zero.

    Raises:
        InvalidAmountError: Unparseable, non-finite or negative input.
    """
    if isinstance(text, float):
        raise InvalidAmountError(field, text, "floats are not accepted for money")
    if isinstance(text, Decimal):
        value = text
    elif isinstance(text, int) and not isinstance(text, bool):
        value = Decimal(text)
    elif isinstance(text, str):
        cleaned = text.strip().replace(",", ".")
        if cleaned == "":
            return Decimal("0")
        if "_" in cleaned:
            raise InvalidAmountError(field, text, "digit separators are not accepted")
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            raise InvalidAmountError(field, text) from None
    else:
        raise InvalidAmountError(field, text)

    if not value.is_finite():
        raise InvalidAmountError(field, text, "amount must be finite")
    if value < 0:
        raise InvalidAmountError(field, text, "amount must not be negative")
    if value.is_zero():
        # -0 compares equal to 0 but would be stored as "-0"
        value = value.copy_abs()
    return value


def parse_positive_amount(
    text: str | Decimal | int | None, field: str = "amount"
) -> Decimal:
    """Like ``parse_amount`` but the result must be strictly positive."""
    value = parse_amount(text, field)
    if value <= 0:
        raise InvalidAmountError(field, text, "amount must be greater than zero")
    return value


# ---------------------------------------------------------------------------
# Persons
# ---------------------------------------------------------------------------


def parse_persons(text: str | int, field: str = "persons") -> int:
    """
    Parse a positive person count from ``"2"`` style input.

    Raises:
        InvalidPersonsError: Not an integer, or not greater than zero.
    """
    if isinstance(text, bool):
        raise InvalidPersonsError(text, field=field)
    if isinstance(text, int):
        value = text
    elif isinstance(text, str) and _PERSONS_RE.match(text.strip()):
        value = int(text.strip())
    else:
        raise InvalidPersonsError(text, field=field)
    if value <= 0:
        raise InvalidPersonsError(text, field=field)
    return value


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def parse_date(text: str | date, field: str = "date") -> date:
    """
    Parse ``YYYY-MM-DD``.

    Raises:
        InvalidDateFormatError: Any other shape, or an impossible date.
    """
    if isinstance(text, datetime):
        return text.date()
    if isinstance(text, date):
        return text
    if not isinstance(text, str):
        raise InvalidDateFormatError(str(text), field=field)
    cleaned = text.strip()
    if not _DATE_RE.match(cleaned):
        raise InvalidDateFormatError(text, field=field)
    try:
        return datetime.strptime(cleaned, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDateFormatError(text, field=field) from None


def parse_optional_date(text: str | date | None, field: str = "date") -> date | None:
    """``parse_date`` that maps ``None`` and blank strings to ``None``."""
    if text is None:
        return None
    if isinstance(text, str) and text.strip() == "":
        return None
    return parse_date(text, field)
