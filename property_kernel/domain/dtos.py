"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable data structures that cross the service boundary:
    drafts (validated input for a write) and infos (read results handed back
    to the facade), plus TenantOutcome for best-effort multi-tenant calls.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of database access.  from_model() class methods exist as boundary
    converters but are only invoked from the service and selector layers.

Invariants enforced:
    - Every draft re-checks itself in validate(), independent of how it was
      built (UI strings, storage rows, batch input).
    - PaymentRecordDraft: tenant_id > 0, month is a Month, persons > 0, all
      monetary fields are finite Decimals >= 0.
    - TenantDraft: move-out strictly after move-in, targets > 0,
      deposit >= 0, persons > 0.

Failure modes:
    - InvalidFieldError for blank names, non-positive ids, numeric city.
    - InvalidAmountError, InvalidPersonsError, InvalidMonthFormatError,
      InvalidDateFormatError as raised by the value parsers.
    - InvalidRangeError when move-out is not after move-in.

Data flow:
    UI strings -> *Draft.from_input -> service.create/update -> ORM row
    ORM row -> *Info.from_model -> facade
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from property_kernel.domain.values import (
    Month,
    parse_amount,
    parse_date,
    parse_optional_date,
    parse_persons,
    parse_positive_amount,
)
from property_kernel.exceptions import (
    InvalidAmountError,
    InvalidFieldError,
    InvalidPersonsError,
    InvalidRangeError,
    PropertyKernelError,
)

if TYPE_CHECKING:
    from property_kernel.models.apartment import Apartment as ApartmentModel
    from property_kernel.models.house import House as HouseModel
    from property_kernel.models.payment_record import (
        PaymentRecord as PaymentRecordModel,
    )
    from property_kernel.models.tenant import Tenant as TenantModel


def _require_text(value: str, field_name: str) -> None:
    if not isinstance(value, str) or value.strip() == "":
        raise InvalidFieldError(field_name, "cannot be empty")


def _require_id(value: int, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidFieldError(field_name, f"must be a positive id, got {value!r}")


def _require_amount(value: Decimal, field_name: str, *, positive: bool = False) -> None:
    if not isinstance(value, Decimal) or not value.is_finite():
        raise InvalidAmountError(field_name, value)
    if value < 0:
        raise InvalidAmountError(field_name, value, "amount must not be negative")
    if positive and value == 0:
        raise InvalidAmountError(field_name, value, "amount must be greater than zero")


def _require_persons(value: int, field_name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidPersonsError(value, field=field_name)


# ---------------------------------------------------------------------------
# Houses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HouseDraft:
    """Validated input for creating or updating a house."""

    name: str
    street: str
    number: str
    country: str
    zip_code: str
    city: str

    @classmethod
    def from_input(
        cls,
        name: str,
        street: str,
        number: str,
        country: str,
        zip_code: str,
        city: str,
    ) -> HouseDraft:
        draft = cls(
            name=name.strip(),
            street=street.strip(),
            number=number.strip(),
            country=country.strip(),
            zip_code=zip_code.strip(),
            city=city.strip(),
        )
        draft.validate()
        return draft

    def validate(self) -> None:
        _require_text(self.name, "name")
        _require_text(self.street, "street")
        _require_text(self.number, "number")
        _require_text(self.country, "country")
        _require_text(self.zip_code, "zip_code")
        _require_text(self.city, "city")
        if self.city.strip().isdigit():
            raise InvalidFieldError("city", "cannot be just a number")


@dataclass(frozen=True)
class HouseInfo:
    id: int
    name: str
    street: str
    number: str
    country: str
    zip_code: str
    city: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: HouseModel) -> HouseInfo:
        return cls(
            id=model.id,
            name=model.name,
            street=model.street,
            number=model.number,
            country=model.country,
            zip_code=model.zip_code,
            city=model.city,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


# ---------------------------------------------------------------------------
# Apartments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ApartmentDraft:
    """Validated input for an apartment; size is in square metres."""

    name: str
    house_id: int
    size: Decimal

    @classmethod
    def from_input(cls, name: str, house_id: int, size: str | Decimal) -> ApartmentDraft:
        draft = cls(
            name=name.strip(),
            house_id=house_id,
            size=parse_positive_amount(size, "size"),
        )
        draft.validate()
        return draft

    def validate(self) -> None:
        _require_text(self.name, "name")
        _require_id(self.house_id, "house_id")
        _require_amount(self.size, "size", positive=True)


@dataclass(frozen=True)
class ApartmentInfo:
    id: int
    name: str
    house_id: int
    size: Decimal
    house: HouseInfo | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: ApartmentModel) -> ApartmentInfo:
        return cls(
            id=model.id,
            name=model.name,
            house_id=model.house_id,
            size=model.size,
            house=HouseInfo.from_model(model.house) if model.house else None,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


# ---------------------------------------------------------------------------
# Tenants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TenantDraft:
    """
    Validated input for creating or updating a tenant.

    Contract:
        ``from_input`` parses the UI's strings; ``validate`` re-checks a
        draft built any other way.

    Guarantees:
        - move_out_date, when set, is strictly after move_in_date.
        - Target amounts are > 0; deposit is >= 0.
    """

    first_name: str
    last_name: str
    move_in_date: date
    move_out_date: date | None
    deposit: Decimal
    email: str | None
    number_of_persons: int
    target_cold_rent: Decimal
    target_ancillary_payment: Decimal
    target_electricity_payment: Decimal
    greeting: str
    house_id: int
    apartment_id: int

    @classmethod
    def from_input(
        cls,
        first_name: str,
        last_name: str,
        move_in_date: str,
        move_out_date: str | None,
        deposit: str,
        email: str | None,
        number_of_persons: str,
        target_cold_rent: str,
        target_ancillary_payment: str,
        target_electricity_payment: str,
        greeting: str,
        house_id: int,
        apartment_id: int,
    ) -> TenantDraft:
        email = email.strip() if email else None
        draft = cls(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            move_in_date=parse_date(move_in_date, "move_in_date"),
            move_out_date=parse_optional_date(move_out_date, "move_out_date"),
            deposit=parse_amount(deposit, "deposit"),
            email=email or None,
            number_of_persons=parse_persons(number_of_persons, "number_of_persons"),
            target_cold_rent=parse_positive_amount(target_cold_rent, "target_cold_rent"),
            target_ancillary_payment=parse_positive_amount(
                target_ancillary_payment, "target_ancillary_payment"
            ),
            target_electricity_payment=parse_positive_amount(
                target_electricity_payment, "target_electricity_payment"
            ),
            greeting=greeting or "",
            house_id=house_id,
            apartment_id=apartment_id,
        )
        draft.validate()
        return draft

    def validate(self) -> None:
        _require_text(self.first_name, "first_name")
        _require_text(self.last_name, "last_name")
        if self.move_out_date is not None and not self.move_out_date > self.move_in_date:
            raise InvalidRangeError(
                self.move_in_date.isoformat(),
                self.move_out_date.isoformat(),
                reason="move-out date must be after move-in date",
            )
        _require_persons(self.number_of_persons, "number_of_persons")
        _require_amount(self.target_cold_rent, "target_cold_rent", positive=True)
        _require_amount(
            self.target_ancillary_payment, "target_ancillary_payment", positive=True
        )
        _require_amount(
            self.target_electricity_payment, "target_electricity_payment", positive=True
        )
        _require_amount(self.deposit, "deposit")
        _require_id(self.house_id, "house_id")
        _require_id(self.apartment_id, "apartment_id")


@dataclass(frozen=True)
class TenantInfo:
    id: int
    first_name: str
    last_name: str
    move_in_date: date
    move_out_date: date | None
    deposit: Decimal
    email: str | None
    number_of_persons: int
    target_cold_rent: Decimal
    target_ancillary_payment: Decimal
    target_electricity_payment: Decimal
    greeting: str
    house_id: int
    apartment_id: int
    house: HouseInfo | None = None
    apartment: ApartmentInfo | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: TenantModel) -> TenantInfo:
        return cls(
            id=model.id,
            first_name=model.first_name,
            last_name=model.last_name,
            move_in_date=model.move_in_date,
            move_out_date=model.move_out_date,
            deposit=model.deposit,
            email=model.email,
            number_of_persons=model.number_of_persons,
            target_cold_rent=model.target_cold_rent,
            target_ancillary_payment=model.target_ancillary_payment,
            target_electricity_payment=model.target_electricity_payment,
            greeting=model.greeting,
            house_id=model.house_id,
            apartment_id=model.apartment_id,
            house=HouseInfo.from_model(model.house) if model.house else None,
            apartment=ApartmentInfo.from_model(model.apartment) if model.apartment else None,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def is_active_on(self, as_of: date) -> bool:
        """No move-out date, or a move-out date after ``as_of``."""
        return self.move_out_date is None or self.move_out_date > as_of


# ---------------------------------------------------------------------------
# Payment records
# ---------------------------------------------------------------------------

MONEY_FIELDS = (
    "target_cold_rent",
    "paid_cold_rent",
    "paid_ancillary",
    "paid_electricity",
    "extra_payments",
)


@dataclass(frozen=True)
class PaymentRecordDraft:
    """
    A payment record as it is about to be written.

    Contract:
        Built from UI strings by ``from_input``, from storage by
        ``PaymentRecordInfo.to_draft``, or by the back-fill planner.
        ``validate`` is called by the service before every write.

    Guarantees:
        - Once validate() returns, month is a Month, amounts are
          non-negative Decimals, persons is a positive int.
    """

    tenant_id: int
    month: Month
    target_cold_rent: Decimal
    paid_cold_rent: Decimal = Decimal("0")
    paid_ancillary: Decimal = Decimal("0")
    paid_electricity: Decimal = Decimal("0")
    extra_payments: Decimal = Decimal("0")
    persons: int = 1
    note: str = ""
    is_locked: bool = False

    @classmethod
    def from_input(
        cls,
        tenant_id: int,
        month: str,
        target_cold_rent: str | Decimal,
        paid_cold_rent: str,
        paid_ancillary: str,
        paid_electricity: str,
        extra_payments: str,
        persons: str,
        note: str = "",
        is_locked: bool = False,
    ) -> PaymentRecordDraft:
        draft = cls(
            tenant_id=tenant_id,
            month=Month.parse(month),
            target_cold_rent=parse_amount(target_cold_rent, "target_cold_rent"),
            paid_cold_rent=parse_amount(paid_cold_rent, "paid_cold_rent"),
            paid_ancillary=parse_amount(paid_ancillary, "paid_ancillary"),
            paid_electricity=parse_amount(paid_electricity, "paid_electricity"),
            extra_payments=parse_amount(extra_payments, "extra_payments"),
            persons=parse_persons(persons),
            note=note or "",
            is_locked=bool(is_locked),
        )
        draft.validate()
        return draft

    def validate(self) -> None:
        """
        Re-check every invariant of a storable record.

        Raises:
            InvalidFieldError: tenant_id is not a positive id.
            InvalidMonthFormatError: month is not a valid year-month.
            InvalidPersonsError: persons is not a positive integer.
            InvalidAmountError: a monetary field is negative or not a Decimal.
        """
        _require_id(self.tenant_id, "tenant_id")
        Month.coerce(self.month)
        _require_persons(self.persons, "persons")
        for name in MONEY_FIELDS:
            _require_amount(getattr(self, name), name)
        if not isinstance(self.note, str):
            raise InvalidFieldError("note", "must be text")

    @property
    def month_key(self) -> str:
        return str(self.month)

    def with_changes(self, **changes: Any) -> PaymentRecordDraft:
        return replace(self, **changes)


@dataclass(frozen=True)
class PaymentRecordInfo:
    id: int
    tenant_id: int
    month: str
    target_cold_rent: Decimal
    paid_cold_rent: Decimal
    paid_ancillary: Decimal
    paid_electricity: Decimal
    extra_payments: Decimal
    persons: int
    note: str
    is_locked: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: PaymentRecordModel) -> PaymentRecordInfo:
        return cls(
            id=model.id,
            tenant_id=model.tenant_id,
            month=model.month,
            target_cold_rent=model.target_cold_rent,
            paid_cold_rent=model.paid_cold_rent,
            paid_ancillary=model.paid_ancillary,
            paid_electricity=model.paid_electricity,
            extra_payments=model.extra_payments,
            persons=model.persons,
            note=model.note,
            is_locked=model.is_locked,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @property
    def total_paid(self) -> Decimal:
        return (
            self.paid_cold_rent
            + self.paid_ancillary
            + self.paid_electricity
            + self.extra_payments
        )

    def display_month(self) -> str:
        """``September 2024`` style label."""
        return Month.parse(self.month).display()

    def format_month(self) -> str:
        """``09.2024`` style label."""
        return Month.parse(self.month).short_display()

    def to_draft(self) -> PaymentRecordDraft:
        """The stored values as a draft, e.g. as the base of a partial edit."""
        return PaymentRecordDraft(
            tenant_id=self.tenant_id,
            month=Month.parse(self.month),
            target_cold_rent=self.target_cold_rent,
            paid_cold_rent=self.paid_cold_rent,
            paid_ancillary=self.paid_ancillary,
            paid_electricity=self.paid_electricity,
            extra_payments=self.extra_payments,
            persons=self.persons,
            note=self.note,
            is_locked=self.is_locked,
        )


# ---------------------------------------------------------------------------
# Best-effort results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TenantOutcome:
    """
    Per-tenant result of a best-effort operation.

    Exactly one of ``value`` and ``error`` is meaningful: ``ok`` tells which.
    """

    tenant_id: int
    value: Any = None
    error: PropertyKernelError | Exception | None = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, tenant_id: int, value: Any) -> TenantOutcome:
        return cls(tenant_id=tenant_id, value=value)

    @classmethod
    def failure(cls, tenant_id: int, error: Exception) -> TenantOutcome:
        return cls(tenant_id=tenant_id, error=error)
