"""
Months -- Pure month-range utilities over ``YYYY-MM`` strings.

Responsibility:
    Expands month ranges and rolling windows used for payment review and
    back-fill.  Inputs and outputs are canonical ``YYYY-MM`` strings so that
    callers at the facade can pass them straight through.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Results are strictly ascending, contiguous and inclusive.

Failure modes:
    - InvalidMonthFormatError if a bound does not parse.
    - InvalidRangeError if end precedes start, or if a window size is < 1.
"""

from __future__ import annotations

from datetime import date

from property_kernel.domain.clock import Clock
from property_kernel.domain.values import Month
from property_kernel.exceptions import InvalidRangeError


def iter_months(start: Month, end: Month):
    """Yield every Month from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current = current.next()


def months_range(start: Month | str, end: Month | str) -> list[str]:
    """
    Ascending inclusive list of months from ``start`` to ``end``.

    >>> months_range("2023-11", "2024-02")
    ['2023-11', '2023-12', '2024-01', '2024-02']
    """
    start_month = Month.coerce(start, field="start_month")
    end_month = Month.coerce(end, field="end_month")
    if end_month < start_month:
        raise InvalidRangeError(str(start_month), str(end_month))
    return [str(m) for m in iter_months(start_month, end_month)]


def last_n_months(n: int, reference_date: date) -> list[str]:
    """
    The ``n`` most recent months up to and including the month of
    ``reference_date``, oldest first.
    """
    if n < 1:
        raise InvalidRangeError(
            "", "", reason=f"number of months must be at least 1, got {n}"
        )
    end = Month.of(reference_date)
    return months_range(end.shift(-(n - 1)), end)


def current_month(clock: Clock) -> Month:
    """The calendar month the clock is currently in."""
    return Month.of(clock.today())
