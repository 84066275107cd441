"""
Typed Exception Hierarchy for the Property Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The UI shows a message for every failed call, but code that reacts to a
failure (tests, the back-fill report, the facade) must not parse that
message. Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, stable)
  3. Structured DATA (field names, ids, offending values)

Example - WRONG way to handle errors:
    try:
        service.create(draft)
    except Exception as e:
        if "already exists" in str(e):
            ...

Example - RIGHT way:
    try:
        service.create(draft)
    except DuplicateRecordError as e:
        show(f"{e.month} already recorded for tenant {e.tenant_id}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PropertyKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidFieldError
    |   +-- InvalidFormatError
    |   |   +-- InvalidMonthFormatError
    |   |   +-- InvalidDateFormatError
    |   +-- InvalidAmountError
    |   +-- InvalidPersonsError
    |   +-- InvalidRangeError
    |
    +-- DuplicateRecordError
    |
    +-- NotFoundError
    |   +-- HouseNotFoundError
    |   +-- ApartmentNotFoundError
    |   +-- TenantNotFoundError
    |   +-- PaymentRecordNotFoundError
    |
    +-- ApartmentHouseMismatchError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Code                      | When Raised
--------------------------|---------------------------------------------------
INVALID_FIELD             | Required text blank, id not positive, bad value
INVALID_FORMAT            | Month is not YYYY-MM / date is not YYYY-MM-DD
INVALID_AMOUNT            | Amount unparseable, non-finite or negative
INVALID_PERSONS           | Person count unparseable or not positive
INVALID_RANGE             | End month before start month
DUPLICATE_RECORD          | Second payment record for (tenant, month)
NOT_FOUND                 | House / apartment / tenant / record id missing
APARTMENT_HOUSE_MISMATCH  | Tenant's apartment belongs to another house

===============================================================================
"""


class PropertyKernelError(Exception):
    """
    Base exception for all property kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PROPERTY_KERNEL_ERROR"


# Validation exceptions


class ValidationError(PropertyKernelError):
    """
    Base exception for rejected input.

    Raised before any write; storage is unchanged when one of these
    propagates.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class InvalidFieldError(ValidationError):
    """A required field is blank or outside its allowed values."""

    code: str = "INVALID_FIELD"


class InvalidFormatError(ValidationError):
    """A month or date string does not parse."""

    code: str = "INVALID_FORMAT"

    def __init__(self, field: str, value: str, expected: str):
        self.value = value
        self.expected = expected
        super().__init__(field, f"invalid format {value!r}: must be {expected}")


class InvalidMonthFormatError(InvalidFormatError):
    """Month string is not a valid YYYY-MM year-month."""

    def __init__(self, value: str, field: str = "month"):
        super().__init__(field, value, "YYYY-MM")


class InvalidDateFormatError(InvalidFormatError):
    """Date string is not a valid YYYY-MM-DD date."""

    def __init__(self, value: str, field: str = "date"):
        super().__init__(field, value, "YYYY-MM-DD")


class InvalidAmountError(ValidationError):
    """Monetary amount is unparseable, non-finite or negative."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: object, reason: str = "invalid amount"):
        self.value = value
        super().__init__(field, f"{reason}: {value!r}")


class InvalidPersonsError(ValidationError):
    """Person count is unparseable or not a positive integer."""

    code: str = "INVALID_PERSONS"

    def __init__(self, value: object, field: str = "persons"):
        self.value = value
        super().__init__(
            field, f"number of persons must be a positive integer, got {value!r}"
        )


class InvalidRangeError(ValidationError):
    """End of a month range precedes its start."""

    code: str = "INVALID_RANGE"

    def __init__(self, start: str, end: str, reason: str | None = None):
        self.start = start
        self.end = end
        super().__init__(
            "range",
            reason or f"end month {end} cannot be before start month {start}",
        )


# Uniqueness


class DuplicateRecordError(PropertyKernelError):
    """A payment record already exists for this tenant and month."""

    code: str = "DUPLICATE_RECORD"

    def __init__(self, tenant_id: int, month: str):
        self.tenant_id = tenant_id
        self.month = month
        super().__init__(
            f"Payment record already exists for tenant {tenant_id} and month {month}"
        )


# Lookup failures


class NotFoundError(PropertyKernelError):
    """Base exception for a referenced entity that does not exist."""

    code: str = "NOT_FOUND"
    entity: str = "entity"

    def __init__(self, entity_id: object):
        self.entity_id = entity_id
        super().__init__(f"{self.entity.capitalize()} not found: {entity_id}")


class HouseNotFoundError(NotFoundError):
    """House with given ID was not found."""

    entity = "house"


class ApartmentNotFoundError(NotFoundError):
    """Apartment with given ID was not found."""

    entity = "apartment"


class TenantNotFoundError(NotFoundError):
    """Tenant with given ID was not found."""

    entity = "tenant"


class PaymentRecordNotFoundError(NotFoundError):
    """Payment record with given ID (or tenant/month) was not found."""

    entity = "payment record"


# Referential rules


class ApartmentHouseMismatchError(PropertyKernelError):
    """The tenant's apartment belongs to a different house."""

    code: str = "APARTMENT_HOUSE_MISMATCH"

    def __init__(self, apartment_id: int, house_id: int, actual_house_id: int):
        self.apartment_id = apartment_id
        self.house_id = house_id
        self.actual_house_id = actual_house_id
        super().__init__(
            f"Apartment {apartment_id} belongs to house {actual_house_id}, "
            f"not house {house_id}"
        )
