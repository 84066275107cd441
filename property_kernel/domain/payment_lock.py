"""
Payment lock -- The rule that freezes a locked record's financial fields.

Responsibility:
    Decides which values of an incoming edit survive when the stored record
    is locked.  Both the single-record update and the batch upsert route
    through ``apply_lock_rule`` so the two paths cannot drift apart.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Locked -> locked: the frozen fields keep their stored values; the
      caller's note and lock flag are taken as given.
    - Locked -> unlocked, or unlocked -> anything: the incoming values are
      taken as given (validation happens separately, before the write).
    - ``target_cold_rent`` is not an edit field at all: updates never
      rewrite the snapshot, only generation and propagation do.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from property_kernel.domain.dtos import PaymentRecordDraft

LOCK_FROZEN_FIELDS: tuple[str, ...] = (
    "paid_cold_rent",
    "paid_ancillary",
    "paid_electricity",
    "extra_payments",
    "persons",
)


class LockableRecord(Protocol):
    """Anything with the stored values the lock rule reads."""

    is_locked: bool
    paid_cold_rent: object
    paid_ancillary: object
    paid_electricity: object
    extra_payments: object
    persons: int


def stays_locked(stored: LockableRecord, incoming: PaymentRecordDraft) -> bool:
    """True if the record was locked and the edit keeps it locked."""
    return bool(stored.is_locked) and bool(incoming.is_locked)


def apply_lock_rule(
    stored: LockableRecord, incoming: PaymentRecordDraft
) -> PaymentRecordDraft:
    """
    Return the draft that should actually be written over ``stored``.

    The note stays editable on a locked record; only LOCK_FROZEN_FIELDS are
    pinned.
    """
    if not stays_locked(stored, incoming):
        return incoming
    frozen = {name: getattr(stored, name) for name in LOCK_FROZEN_FIELDS}
    return replace(incoming, **frozen)


def frozen_field_changes(
    stored: LockableRecord, incoming: PaymentRecordDraft
) -> list[str]:
    """Names of frozen fields the caller tried to change on a locked record."""
    if not stays_locked(stored, incoming):
        return []
    return [
        name
        for name in LOCK_FROZEN_FIELDS
        if getattr(stored, name) != getattr(incoming, name)
    ]
