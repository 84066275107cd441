"""
property_services.app -- Application facade bound into the UI runtime.

Responsibility:
    Exposes every house, apartment, tenant and payment operation as a flat
    request/response call.  Raw UI strings are parsed into drafts here,
    once; each call then runs inside its own ``session_scope`` so that it
    commits or rolls back as a unit.

Architecture position:
    Services -- orchestration over ``property_kernel``.
    Composes HouseService, ApartmentService, TenantService,
    PaymentRecordService, PaymentGenerationService and
    PaymentRecordSelector.  Owns the Database handle's lifecycle
    (``startup`` / ``shutdown``).

Invariants enforced:
    - One transaction per call.  Tenant updates and the propagation of a
      changed rent or person count share that transaction; a batch save is
      one transaction for the whole batch.
    - Back-fill runs in its own transaction per tenant.

Failure modes:
    - Kernel exceptions propagate to the UI unchanged, except at the
      best-effort sites below.
    - Best-effort: startup back-fill, the house-level payment view, and
      generation after tenant creation log failures and report them instead
      of raising.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from property_config.schema import AppConfig
from property_kernel import __version__
from property_kernel.db.engine import Database
from property_kernel.domain.clock import Clock, SystemClock
from property_kernel.domain.dtos import (
    ApartmentDraft,
    ApartmentInfo,
    HouseDraft,
    HouseInfo,
    PaymentRecordDraft,
    PaymentRecordInfo,
    TenantDraft,
    TenantInfo,
    TenantOutcome,
)
from property_kernel.domain.months import current_month, last_n_months
from property_kernel.exceptions import InvalidFieldError
from property_kernel.logging_config import LogContext, get_logger
from property_kernel.selectors.payment_record_selector import PaymentRecordSelector
from property_kernel.services.apartment_service import ApartmentService
from property_kernel.services.house_service import HouseService
from property_kernel.services.payment_generation_service import (
    PaymentGenerationService,
)
from property_kernel.services.payment_record_service import PaymentRecordService
from property_kernel.services.tenant_service import TenantService

logger = get_logger("services.app")

APP_NAME = "Property Management System"


class PropertyManagementApp:
    """
    Facade over the property kernel.

    Contract:
        Constructed with an open Database handle.  ``startup()`` creates the
        schema and back-fills payment records; ``shutdown()`` closes the
        handle.  All other methods may be called in between, from a single
        thread.

    Guarantees:
        - Returned objects are frozen DTOs, safe to use after the call's
          session is closed.
    """

    def __init__(
        self,
        database: Database,
        clock: Clock | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self._database = database
        self._clock = clock or SystemClock()
        self._config = config or AppConfig()

    @classmethod
    def from_config(cls, config: AppConfig, clock: Clock | None = None) -> PropertyManagementApp:
        """Open the configured database file and build the facade on it."""
        options = {
            "echo": config.database.echo,
            "enforce_foreign_keys": config.database.enforce_foreign_keys,
        }
        if config.database.path == ":memory:":
            database = Database(config.database.url, **options)
        else:
            database = Database.from_path(config.database.resolved_path, **options)
        return cls(database, clock=clock, config=config)

    @property
    def database(self) -> Database:
        return self._database

    @property
    def config(self) -> AppConfig:
        return self._config

    @contextmanager
    def _unit(self, operation: str, **context: Any) -> Iterator[Session]:
        """One logged, transactional unit of work."""
        with LogContext.bind(operation=operation, **context):
            with self._database.session_scope() as session:
                yield session

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def startup(self) -> list[TenantOutcome]:
        """
        Create missing tables and back-fill payment records.

        Never raises for a single tenant's back-fill failure; the returned
        outcomes say which tenants failed.
        """
        self._database.create_tables()
        outcomes = self.ensure_payment_records_for_active_tenants()
        logger.info(
            "app_started",
            extra={"version": __version__, "tenants": len(outcomes)},
        )
        return outcomes

    def shutdown(self) -> None:
        self._database.close()
        logger.info("app_shutdown")

    def get_app_info(self) -> dict[str, str]:
        return {
            "name": APP_NAME,
            "version": __version__,
            "status": "Houses, Apartments, Tenants, and Payments Management Implemented",
        }

    # ------------------------------------------------------------------
    # Houses
    # ------------------------------------------------------------------

    def create_house(
        self, name: str, street: str, number: str, country: str, zip_code: str, city: str
    ) -> HouseInfo:
        draft = HouseDraft.from_input(name, street, number, country, zip_code, city)
        with self._unit("create_house") as session:
            return HouseService(session, self._clock).create(draft)

    def get_all_houses(self) -> list[HouseInfo]:
        with self._unit("get_all_houses") as session:
            return HouseService(session, self._clock).list_all()

    def get_house_by_id(self, house_id: int) -> HouseInfo:
        with self._unit("get_house_by_id", house_id=house_id) as session:
            return HouseService(session, self._clock).get_by_id(house_id)

    def update_house(
        self,
        house_id: int,
        name: str,
        street: str,
        number: str,
        country: str,
        zip_code: str,
        city: str,
    ) -> HouseInfo:
        draft = HouseDraft.from_input(name, street, number, country, zip_code, city)
        with self._unit("update_house", house_id=house_id) as session:
            return HouseService(session, self._clock).update(house_id, draft)

    def delete_house(self, house_id: int) -> None:
        with self._unit("delete_house", house_id=house_id) as session:
            HouseService(session, self._clock).delete(house_id)

    # ------------------------------------------------------------------
    # Apartments
    # ------------------------------------------------------------------

    def create_apartment(self, name: str, house_id: int, size: str) -> ApartmentInfo:
        draft = ApartmentDraft.from_input(name, house_id, size)
        with self._unit("create_apartment", house_id=house_id) as session:
            return ApartmentService(session, self._clock).create(draft)

    def get_all_apartments(self) -> list[ApartmentInfo]:
        with self._unit("get_all_apartments") as session:
            return ApartmentService(session, self._clock).list_all()

    def get_apartments_by_house_id(self, house_id: int) -> list[ApartmentInfo]:
        with self._unit("get_apartments_by_house_id", house_id=house_id) as session:
            return ApartmentService(session, self._clock).list_by_house(house_id)

    def get_apartment_by_id(self, apartment_id: int) -> ApartmentInfo:
        with self._unit("get_apartment_by_id") as session:
            return ApartmentService(session, self._clock).get_by_id(apartment_id)

    def update_apartment(
        self, apartment_id: int, name: str, house_id: int, size: str
    ) -> ApartmentInfo:
        draft = ApartmentDraft.from_input(name, house_id, size)
        with self._unit("update_apartment", house_id=house_id) as session:
            return ApartmentService(session, self._clock).update(apartment_id, draft)

    def delete_apartment(self, apartment_id: int) -> None:
        with self._unit("delete_apartment") as session:
            ApartmentService(session, self._clock).delete(apartment_id)

    # ------------------------------------------------------------------
    # Tenants
    # ------------------------------------------------------------------

    def create_tenant(
        self,
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
    ) -> TenantInfo:
        """
        Create a tenant, then generate their payment records.

        Generation runs in a second transaction.  If it fails, the tenant
        still exists, the failure is logged, and the next startup back-fill
        retries it.
        """
        draft = TenantDraft.from_input(
            first_name,
            last_name,
            move_in_date,
            move_out_date,
            deposit,
            email,
            number_of_persons,
            target_cold_rent,
            target_ancillary_payment,
            target_electricity_payment,
            greeting,
            house_id,
            apartment_id,
        )
        with self._unit("create_tenant", house_id=house_id) as session:
            tenant = TenantService(session, self._clock).create(draft)

        try:
            with self._unit("generate_payment_records", tenant_id=tenant.id) as session:
                PaymentGenerationService(session, self._clock).generate_for_tenant(tenant.id)
        except Exception:
            logger.warning(
                "payment_generation_failed",
                extra={"tenant_id": tenant.id},
                exc_info=True,
            )
        return tenant

    def get_all_tenants(self) -> list[TenantInfo]:
        with self._unit("get_all_tenants") as session:
            return TenantService(session, self._clock).list_all()

    def get_tenants_by_house_id(self, house_id: int) -> list[TenantInfo]:
        with self._unit("get_tenants_by_house_id", house_id=house_id) as session:
            return TenantService(session, self._clock).list_by_house(house_id)

    def get_current_tenants_by_house_id(self, house_id: int) -> list[TenantInfo]:
        with self._unit("get_current_tenants_by_house_id", house_id=house_id) as session:
            return TenantService(session, self._clock).list_current_by_house(
                house_id, self._clock.today()
            )

    def get_tenants_by_apartment_id(self, apartment_id: int) -> list[TenantInfo]:
        with self._unit("get_tenants_by_apartment_id") as session:
            return TenantService(session, self._clock).list_by_apartment(apartment_id)

    def get_tenant_by_id(self, tenant_id: int) -> TenantInfo:
        with self._unit("get_tenant_by_id", tenant_id=tenant_id) as session:
            return TenantService(session, self._clock).get_by_id(tenant_id)

    def update_tenant(
        self,
        tenant_id: int,
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
    ) -> TenantInfo:
        """
        Update a tenant.  A changed target cold rent or person count is
        copied onto the tenant's unlocked records from the current month
        on, in the same transaction.
        """
        draft = TenantDraft.from_input(
            first_name,
            last_name,
            move_in_date,
            move_out_date,
            deposit,
            email,
            number_of_persons,
            target_cold_rent,
            target_ancillary_payment,
            target_electricity_payment,
            greeting,
            house_id,
            apartment_id,
        )
        with self._unit("update_tenant", tenant_id=tenant_id, house_id=house_id) as session:
            tenants = TenantService(session, self._clock)
            records = PaymentRecordService(session, self._clock)
            before = tenants.get_by_id(tenant_id)
            after = tenants.update(tenant_id, draft)

            from_month = current_month(self._clock)
            if after.target_cold_rent != before.target_cold_rent:
                records.propagate_target_cold_rent(
                    tenant_id, after.target_cold_rent, from_month
                )
            if after.number_of_persons != before.number_of_persons:
                records.propagate_persons(tenant_id, after.number_of_persons, from_month)
            return after

    def delete_tenant(self, tenant_id: int) -> None:
        """Delete a tenant.  Their payment records are kept."""
        with self._unit("delete_tenant", tenant_id=tenant_id) as session:
            TenantService(session, self._clock).delete(tenant_id)

    # ------------------------------------------------------------------
    # Payment records
    # ------------------------------------------------------------------

    def create_payment_record(
        self,
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
    ) -> PaymentRecordInfo:
        draft = PaymentRecordDraft.from_input(
            tenant_id,
            month,
            target_cold_rent,
            paid_cold_rent,
            paid_ancillary,
            paid_electricity,
            extra_payments,
            persons,
            note,
            is_locked,
        )
        with self._unit("create_payment_record", tenant_id=tenant_id) as session:
            return PaymentRecordService(session, self._clock).create(draft)

    def get_payment_record_by_id(self, record_id: int) -> PaymentRecordInfo:
        with self._unit("get_payment_record_by_id", record_id=record_id) as session:
            return PaymentRecordService(session, self._clock).get_by_id(record_id)

    def get_payment_records_by_tenant_id(self, tenant_id: int) -> list[PaymentRecordInfo]:
        """All records of a tenant, newest month first."""
        with self._unit("get_payment_records_by_tenant_id", tenant_id=tenant_id) as session:
            return PaymentRecordService(session, self._clock).list_by_tenant(tenant_id)

    def get_recent_payment_records_by_tenant_id(
        self, tenant_id: int
    ) -> list[PaymentRecordInfo]:
        """The configured review window of a tenant's records, oldest first."""
        count = self._config.payments.review_window_months
        with self._unit("get_recent_payment_records", tenant_id=tenant_id) as session:
            return PaymentRecordSelector(session, self._clock).recent_for_tenant(
                tenant_id, count
            )

    def get_payment_record_by_tenant_and_month(
        self, tenant_id: int, month: str
    ) -> PaymentRecordInfo:
        with self._unit("get_payment_record_by_tenant_and_month", tenant_id=tenant_id) as session:
            return PaymentRecordService(session, self._clock).get_by_tenant_and_month(
                tenant_id, month
            )

    def get_payment_records_for_month_range(
        self, tenant_id: int, start_month: str, end_month: str
    ) -> list[PaymentRecordInfo]:
        with self._unit("get_payment_records_for_month_range", tenant_id=tenant_id) as session:
            return PaymentRecordSelector(session, self._clock).for_month_range(
                tenant_id, start_month, end_month
            )

    def update_payment_record(
        self,
        record_id: int,
        paid_cold_rent: str,
        paid_ancillary: str,
        paid_electricity: str,
        extra_payments: str,
        persons: str,
        note: str,
        is_locked: bool,
    ) -> PaymentRecordInfo:
        """
        Edit a record.  If it is locked and stays locked, only the note and
        lock flag change.
        """
        with self._unit("update_payment_record", record_id=record_id) as session:
            service = PaymentRecordService(session, self._clock)
            stored = service.get_by_id(record_id)
            draft = PaymentRecordDraft.from_input(
                stored.tenant_id,
                stored.month,
                stored.target_cold_rent,
                paid_cold_rent,
                paid_ancillary,
                paid_electricity,
                extra_payments,
                persons,
                note,
                is_locked,
            )
            return service.update(record_id, draft)

    def delete_payment_record(self, record_id: int) -> None:
        with self._unit("delete_payment_record", record_id=record_id) as session:
            PaymentRecordService(session, self._clock).delete(record_id)

    def get_payment_records_for_house(
        self, house_id: int
    ) -> dict[int, list[PaymentRecordInfo]]:
        """
        Recent records of every current tenant of a house, keyed by tenant
        id.  Tenants whose records cannot be read are left out (and logged).
        """
        outcomes = self.get_payment_outcomes_for_house(house_id)
        return {o.tenant_id: o.value for o in outcomes if o.ok}

    def get_payment_outcomes_for_house(self, house_id: int) -> list[TenantOutcome]:
        """Like get_payment_records_for_house, but failures are reported too."""
        count = self._config.payments.review_window_months
        with self._unit("get_payment_records_for_house", house_id=house_id) as session:
            return PaymentRecordSelector(
                session, self._clock
            ).current_tenants_payments_for_house(house_id, self._clock.today(), count)

    def batch_save_payment_records(
        self, records: Iterable[PaymentRecordDraft | Mapping[str, Any]]
    ) -> list[PaymentRecordInfo]:
        """
        Insert or update many records in one transaction.  Any failure
        rolls back the whole batch.
        """
        drafts = [_as_draft(r) for r in records]
        with self._unit("batch_save_payment_records") as session:
            return PaymentRecordService(session, self._clock).batch_upsert(drafts)

    def get_last_twelve_months(self) -> list[str]:
        return last_n_months(12, self._clock.today())

    def update_payment_record_note(self, record_id: int, note: str) -> PaymentRecordInfo:
        with self._unit("update_payment_record_note", record_id=record_id) as session:
            return PaymentRecordService(session, self._clock).update_note(record_id, note)

    def toggle_payment_record_lock(self, record_id: int) -> PaymentRecordInfo:
        with self._unit("toggle_payment_record_lock", record_id=record_id) as session:
            return PaymentRecordService(session, self._clock).toggle_lock(record_id)

    # ------------------------------------------------------------------
    # Back-fill
    # ------------------------------------------------------------------

    def ensure_payment_records_for_active_tenants(self) -> list[TenantOutcome]:
        """
        Generate missing records for every active tenant.

        Each tenant is its own transaction.  A failure for one tenant is
        logged as ``backfill_tenant_failed``, recorded in the returned
        outcomes, and does not stop the others.
        """
        today = self._clock.today()
        with self._unit("backfill") as session:
            tenant_ids = [
                t.id for t in TenantService(session, self._clock).list_active(today)
            ]

        outcomes: list[TenantOutcome] = []
        for tenant_id in tenant_ids:
            try:
                with self._unit("backfill", tenant_id=tenant_id) as session:
                    created = PaymentGenerationService(
                        session, self._clock
                    ).generate_for_tenant(tenant_id)
            except Exception as exc:
                logger.warning(
                    "backfill_tenant_failed",
                    extra={"tenant_id": tenant_id},
                    exc_info=True,
                )
                outcomes.append(TenantOutcome.failure(tenant_id, exc))
                continue
            outcomes.append(TenantOutcome.success(tenant_id, len(created)))

        failed = [o.tenant_id for o in outcomes if not o.ok]
        logger.info(
            "backfill_run_completed",
            extra={
                "as_of": today,
                "tenants": len(outcomes),
                "inserted": sum(o.value for o in outcomes if o.ok),
                "failed_tenants": failed,
            },
        )
        return outcomes


_DRAFT_KEYS = (
    "tenant_id",
    "month",
    "target_cold_rent",
    "paid_cold_rent",
    "paid_ancillary",
    "paid_electricity",
    "extra_payments",
    "persons",
)


def _as_draft(record: PaymentRecordDraft | Mapping[str, Any]) -> PaymentRecordDraft:
    """Accept drafts as-is; parse plain mappings sent by the UI."""
    if isinstance(record, PaymentRecordDraft):
        return record
    missing = [k for k in _DRAFT_KEYS if k not in record]
    if missing:
        raise InvalidFieldError("payment_record", f"missing {', '.join(missing)}")
    return PaymentRecordDraft.from_input(
        record["tenant_id"],
        record["month"],
        record["target_cold_rent"],
        record["paid_cold_rent"],
        record["paid_ancillary"],
        record["paid_electricity"],
        record["extra_payments"],
        record["persons"],
        record.get("note", ""),
        bool(record.get("is_locked", False)),
    )
