"""
PaymentRecordService -- Lock-aware writes for monthly payment records.

Responsibility:
    Creates, updates, deletes and batch-upserts payment records, and
    propagates changed tenant targets onto records that are still open.
    Every write goes through ``PaymentRecordDraft.validate()`` first and
    every update of an existing row goes through ``apply_lock_rule``.

Architecture position:
    Kernel > Services -- imperative shell, flush-only.  The caller's
    ``session_scope`` makes each public call (and, for batch_upsert, the
    whole batch) all-or-nothing.

Invariants enforced:
    - At most one record per (tenant, month): DuplicateRecordError on create,
      update-in-place on batch upsert.
    - No record for a tenant that does not exist.
    - Locked records keep their paid amounts and persons until unlocked;
      note and lock flag remain writable.
    - Validation happens before the stored row is touched, so a rejected
      write leaves it unchanged.

Failure modes:
    - ValidationError subclasses from draft validation.
    - TenantNotFoundError when the referenced tenant does not exist.
    - PaymentRecordNotFoundError for an unknown record id or (tenant, month).
    - DuplicateRecordError on create for an existing (tenant, month).
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import select

from property_kernel.domain.dtos import PaymentRecordDraft, PaymentRecordInfo
from property_kernel.domain.payment_lock import apply_lock_rule, frozen_field_changes
from property_kernel.domain.values import Month, parse_amount, parse_persons
from property_kernel.exceptions import (
    DuplicateRecordError,
    PaymentRecordNotFoundError,
    TenantNotFoundError,
)
from property_kernel.logging_config import LogContext, get_logger
from property_kernel.models.payment_record import PaymentRecord
from property_kernel.models.tenant import Tenant
from property_kernel.services.base import BaseService

logger = get_logger("services.payment_record")


class PaymentRecordService(BaseService[PaymentRecord]):
    """
    Service for payment record writes.

    Contract:
        Public methods take drafts (or ids plus scalar edits) and return
        PaymentRecordInfo DTOs.  Reads that back the UI's review screens
        live in PaymentRecordSelector; the simple lookups here exist because
        writes need them.

    Guarantees:
        - update() never rewrites tenant_id, month or target_cold_rent.
        - batch_upsert() either applies every draft or raises on the first
          failure, leaving the rollback to the caller's transaction.
    """

    def _to_dto(self, record: PaymentRecord) -> PaymentRecordInfo:
        return PaymentRecordInfo.from_model(record)

    def _get_by_id(self, record_id: int) -> PaymentRecord:
        """Get payment record by ID, raising if not found."""
        record = self.session.get(PaymentRecord, record_id)
        if record is None:
            raise PaymentRecordNotFoundError(record_id)
        return record

    def _find(self, tenant_id: int, month: Month | str) -> PaymentRecord | None:
        stmt = select(PaymentRecord).where(
            PaymentRecord.tenant_id == tenant_id,
            PaymentRecord.month == str(Month.coerce(month)),
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def _require_tenant(self, tenant_id: int) -> Tenant:
        tenant = self.session.get(Tenant, tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    def _insert(self, draft: PaymentRecordDraft) -> PaymentRecord:
        record = PaymentRecord(
            tenant_id=draft.tenant_id,
            month=draft.month_key,
            target_cold_rent=draft.target_cold_rent,
            paid_cold_rent=draft.paid_cold_rent,
            paid_ancillary=draft.paid_ancillary,
            paid_electricity=draft.paid_electricity,
            extra_payments=draft.extra_payments,
            persons=draft.persons,
            note=draft.note,
            is_locked=draft.is_locked,
        )
        self.session.add(record)
        self.session.flush()
        return record

    def _overwrite(self, record: PaymentRecord, draft: PaymentRecordDraft) -> None:
        """Apply the lock rule and write the editable fields of ``draft``."""
        discarded = frozen_field_changes(record, draft)
        effective = apply_lock_rule(record, draft)
        if discarded:
            logger.info(
                "payment_record_lock_applied",
                extra={
                    "record_id": record.id,
                    "tenant_id": record.tenant_id,
                    "month": record.month,
                    "discarded_fields": discarded,
                },
            )

        record.paid_cold_rent = effective.paid_cold_rent
        record.paid_ancillary = effective.paid_ancillary
        record.paid_electricity = effective.paid_electricity
        record.extra_payments = effective.extra_payments
        record.persons = effective.persons
        record.note = effective.note
        record.is_locked = effective.is_locked
        self.session.flush()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, record_id: int) -> PaymentRecordInfo:
        """
        Get payment record by ID.

        Raises:
            PaymentRecordNotFoundError: If the record doesn't exist.
        """
        return self._to_dto(self._get_by_id(record_id))

    def find_by_tenant_and_month(
        self, tenant_id: int, month: Month | str
    ) -> PaymentRecordInfo | None:
        record = self._find(tenant_id, month)
        return self._to_dto(record) if record else None

    def get_by_tenant_and_month(
        self, tenant_id: int, month: Month | str
    ) -> PaymentRecordInfo:
        """
        Get the record for one tenant and month.

        Raises:
            InvalidMonthFormatError: If month does not parse.
            PaymentRecordNotFoundError: If there is no such record.
        """
        record = self._find(tenant_id, month)
        if record is None:
            raise PaymentRecordNotFoundError(f"tenant {tenant_id}, month {month}")
        return self._to_dto(record)

    def list_by_tenant(self, tenant_id: int) -> list[PaymentRecordInfo]:
        """All records of a tenant, newest month first."""
        stmt = (
            select(PaymentRecord)
            .where(PaymentRecord.tenant_id == tenant_id)
            .order_by(PaymentRecord.month.desc())
        )
        return [self._to_dto(r) for r in self.session.execute(stmt).scalars().all()]

    def existing_months(self, tenant_id: int) -> set[str]:
        stmt = select(PaymentRecord.month).where(PaymentRecord.tenant_id == tenant_id)
        return set(self.session.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, draft: PaymentRecordDraft) -> PaymentRecordInfo:
        """
        Insert a new record.

        Raises:
            ValidationError: If the draft is invalid.
            TenantNotFoundError: If the tenant doesn't exist.
            DuplicateRecordError: If the tenant already has a record for the
                month.
        """
        draft.validate()
        self._require_tenant(draft.tenant_id)
        if self._find(draft.tenant_id, draft.month) is not None:
            raise DuplicateRecordError(draft.tenant_id, draft.month_key)

        record = self._insert(draft)
        logger.info(
            "payment_record_created",
            extra={
                "record_id": record.id,
                "tenant_id": record.tenant_id,
                "month": record.month,
                "is_locked": record.is_locked,
            },
        )
        return self._to_dto(record)

    def update(self, record_id: int, draft: PaymentRecordDraft) -> PaymentRecordInfo:
        """
        Write an edit onto an existing record, honouring its lock.

        Only the paid amounts, persons, note and lock flag are written;
        tenant, month and target cold rent of the stored row are kept.

        Raises:
            ValidationError: If the draft is invalid (row unchanged).
            PaymentRecordNotFoundError: If the record doesn't exist.
        """
        draft.validate()
        record = self._get_by_id(record_id)
        with LogContext.bind(record_id=record.id, tenant_id=record.tenant_id):
            was_locked = record.is_locked
            self._overwrite(record, draft)
            logger.info(
                "payment_record_updated",
                extra={
                    "month": record.month,
                    "was_locked": was_locked,
                    "is_locked": record.is_locked,
                },
            )
        return self._to_dto(record)

    def update_note(self, record_id: int, note: str) -> PaymentRecordInfo:
        """Change only the note; allowed on locked records."""
        stored = self.get_by_id(record_id)
        return self.update(record_id, stored.to_draft().with_changes(note=note or ""))

    def set_locked(self, record_id: int, locked: bool) -> PaymentRecordInfo:
        stored = self.get_by_id(record_id)
        return self.update(record_id, stored.to_draft().with_changes(is_locked=locked))

    def toggle_lock(self, record_id: int) -> PaymentRecordInfo:
        """Flip the lock flag and return the updated record."""
        stored = self.get_by_id(record_id)
        return self.set_locked(record_id, not stored.is_locked)

    def delete(self, record_id: int) -> None:
        """
        Delete a record.

        Raises:
            PaymentRecordNotFoundError: If the record doesn't exist.
        """
        record = self._get_by_id(record_id)
        tenant_id = record.tenant_id
        self.session.delete(record)
        self.session.flush()
        logger.info(
            "payment_record_deleted",
            extra={"record_id": record_id, "tenant_id": tenant_id},
        )

    def batch_upsert(
        self, drafts: Iterable[PaymentRecordDraft]
    ) -> list[PaymentRecordInfo]:
        """
        Insert or update many records as one unit.

        Each draft is validated and matched by (tenant, month).  New rows
        are inserted as given, including their lock state; existing rows
        are updated under the lock rule.  The first failure propagates and
        the caller's transaction discards everything flushed so far.

        Raises:
            ValidationError: If any draft is invalid.
            TenantNotFoundError: If any new row references a missing tenant.
        """
        results: list[PaymentRecordInfo] = []
        inserted = updated = 0
        for draft in drafts:
            draft.validate()
            record = self._find(draft.tenant_id, draft.month)
            if record is None:
                self._require_tenant(draft.tenant_id)
                record = self._insert(draft)
                inserted += 1
            else:
                self._overwrite(record, draft)
                updated += 1
            results.append(self._to_dto(record))

        logger.info(
            "payment_records_batch_upserted",
            extra={"inserted": inserted, "updated": updated},
        )
        return results

    # ------------------------------------------------------------------
    # Propagation of tenant changes
    # ------------------------------------------------------------------

    def _open_records_from(
        self, tenant_id: int, from_month: Month | str
    ) -> list[PaymentRecord]:
        stmt = select(PaymentRecord).where(
            PaymentRecord.tenant_id == tenant_id,
            PaymentRecord.month >= str(Month.coerce(from_month, field="from_month")),
            PaymentRecord.is_locked.is_(False),
        )
        return list(self.session.execute(stmt).scalars().all())

    def propagate_target_cold_rent(
        self, tenant_id: int, amount: Decimal | str, from_month: Month | str
    ) -> int:
        """
        Rewrite the target cold rent snapshot on unlocked records at or
        after ``from_month``.  Returns the number of records changed.
        """
        value = parse_amount(amount, "target_cold_rent")
        records = self._open_records_from(tenant_id, from_month)
        for record in records:
            record.target_cold_rent = value
        self.session.flush()
        logger.info(
            "target_cold_rent_propagated",
            extra={
                "tenant_id": tenant_id,
                "from_month": str(from_month),
                "amount": value,
                "records": len(records),
            },
        )
        return len(records)

    def propagate_persons(
        self, tenant_id: int, persons: int | str, from_month: Month | str
    ) -> int:
        """
        Rewrite the persons snapshot on unlocked records at or after
        ``from_month``.  Returns the number of records changed.
        """
        value = parse_persons(persons)
        records = self._open_records_from(tenant_id, from_month)
        for record in records:
            record.persons = value
        self.session.flush()
        logger.info(
            "persons_propagated",
            extra={
                "tenant_id": tenant_id,
                "from_month": str(from_month),
                "persons": value,
                "records": len(records),
            },
        )
        return len(records)
