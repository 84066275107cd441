"""
Tests for the payment lock rule.

Locked -> locked pins the financial fields and persons; note and the lock
flag still follow the caller.  Any other transition writes the edit as
given.
"""

from decimal import Decimal
from types import SimpleNamespace

from property_kernel.domain.dtos import PaymentRecordDraft
from property_kernel.domain.payment_lock import (
    LOCK_FROZEN_FIELDS,
    apply_lock_rule,
    frozen_field_changes,
)
from property_kernel.domain.values import Month


def _stored(is_locked):
    return SimpleNamespace(
        is_locked=is_locked,
        paid_cold_rent=Decimal("800"),
        paid_ancillary=Decimal("200"),
        paid_electricity=Decimal("50"),
        extra_payments=Decimal("0"),
        persons=2,
    )


def _incoming(is_locked, note="changed"):
    return PaymentRecordDraft(
        tenant_id=1,
        month=Month(2023, 1),
        target_cold_rent=Decimal("800"),
        paid_cold_rent=Decimal("999"),
        paid_ancillary=Decimal("1"),
        paid_electricity=Decimal("2"),
        extra_payments=Decimal("3"),
        persons=5,
        note=note,
        is_locked=is_locked,
    )


def test_frozen_fields_are_the_financial_ones():
    assert set(LOCK_FROZEN_FIELDS) == {
        "paid_cold_rent",
        "paid_ancillary",
        "paid_electricity",
        "extra_payments",
        "persons",
    }


def test_still_locked_keeps_stored_financials():
    result = apply_lock_rule(_stored(True), _incoming(True))
    assert result.paid_cold_rent == Decimal("800")
    assert result.paid_ancillary == Decimal("200")
    assert result.paid_electricity == Decimal("50")
    assert result.extra_payments == Decimal("0")
    assert result.persons == 2


def test_still_locked_takes_note_and_flag():
    result = apply_lock_rule(_stored(True), _incoming(True, note="called tenant"))
    assert result.note == "called tenant"
    assert result.is_locked is True


def test_unlocking_writes_everything():
    incoming = _incoming(False)
    assert apply_lock_rule(_stored(True), incoming) == incoming


def test_unlocked_record_writes_everything():
    incoming = _incoming(False)
    assert apply_lock_rule(_stored(False), incoming) == incoming


def test_locking_an_unlocked_record_writes_everything():
    incoming = _incoming(True)
    assert apply_lock_rule(_stored(False), incoming) == incoming


def test_discarded_fields_are_reported():
    changed = frozen_field_changes(_stored(True), _incoming(True))
    assert changed == list(LOCK_FROZEN_FIELDS)
    assert frozen_field_changes(_stored(False), _incoming(True)) == []
