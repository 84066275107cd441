"""
Service layer for Tenant operations.

Responsibility:
    CRUD for tenants plus the "active tenant" queries that payment
    generation and the house-level payment view depend on.

Architecture position:
    Kernel > Services -- imperative shell, flush-only.

Invariants enforced:
    - A tenant's apartment exists and belongs to the tenant's house.
    - Deleting a tenant leaves its payment records in place.

Failure modes:
    - TenantNotFoundError, ApartmentNotFoundError, HouseNotFoundError.
    - ApartmentHouseMismatchError when apartment and house disagree.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from property_kernel.domain.dtos import TenantDraft, TenantInfo
from property_kernel.exceptions import (
    ApartmentHouseMismatchError,
    ApartmentNotFoundError,
    HouseNotFoundError,
    TenantNotFoundError,
)
from property_kernel.logging_config import get_logger
from property_kernel.models.apartment import Apartment
from property_kernel.models.house import House
from property_kernel.models.tenant import Tenant
from property_kernel.services.base import BaseService

logger = get_logger("services.tenant")


class TenantService(BaseService[Tenant]):
    """
    Service for managing tenants.

    Contract:
        "Active as of" means no move-out date, or a move-out date strictly
        after the reference date.  The reference date defaults to the
        injected clock's today.
    """

    def _to_dto(self, tenant: Tenant) -> TenantInfo:
        return TenantInfo.from_model(tenant)

    def _get_by_id(self, tenant_id: int) -> Tenant:
        """Get tenant by ID, raising if not found."""
        tenant = self.session.get(Tenant, tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    def _resolve_placement(self, draft: TenantDraft) -> tuple[House, Apartment]:
        apartment = self.session.get(Apartment, draft.apartment_id)
        if apartment is None:
            raise ApartmentNotFoundError(draft.apartment_id)
        if apartment.house_id != draft.house_id:
            raise ApartmentHouseMismatchError(
                draft.apartment_id, draft.house_id, apartment.house_id
            )
        house = self.session.get(House, draft.house_id)
        if house is None:
            raise HouseNotFoundError(draft.house_id)
        return house, apartment

    def _list(self, stmt) -> list[TenantInfo]:
        stmt = stmt.order_by(Tenant.last_name, Tenant.first_name, Tenant.id)
        return [self._to_dto(t) for t in self.session.execute(stmt).unique().scalars().all()]

    def exists(self, tenant_id: int) -> bool:
        return self.session.get(Tenant, tenant_id) is not None

    def get_by_id(self, tenant_id: int) -> TenantInfo:
        """
        Get tenant by ID.

        Raises:
            TenantNotFoundError: If tenant doesn't exist.
        """
        return self._to_dto(self._get_by_id(tenant_id))

    def list_all(self) -> list[TenantInfo]:
        return self._list(select(Tenant))

    def list_by_house(self, house_id: int) -> list[TenantInfo]:
        return self._list(select(Tenant).where(Tenant.house_id == house_id))

    def list_by_apartment(self, apartment_id: int) -> list[TenantInfo]:
        return self._list(select(Tenant).where(Tenant.apartment_id == apartment_id))

    def list_active(self, as_of: date | None = None) -> list[TenantInfo]:
        """Tenants with no move-out date or one after ``as_of``."""
        as_of = as_of or self._clock.today()
        return self._list(select(Tenant).where(Tenant.active_on(as_of)))

    def list_current_by_house(
        self, house_id: int, as_of: date | None = None
    ) -> list[TenantInfo]:
        """Active tenants of one house."""
        as_of = as_of or self._clock.today()
        return self._list(
            select(Tenant).where(Tenant.house_id == house_id, Tenant.active_on(as_of))
        )

    def create(self, draft: TenantDraft) -> TenantInfo:
        """
        Create a new tenant.

        Raises:
            ApartmentNotFoundError: If the apartment doesn't exist.
            ApartmentHouseMismatchError: If the apartment is in another house.
            HouseNotFoundError: If the house doesn't exist.
        """
        draft.validate()
        house, apartment = self._resolve_placement(draft)
        tenant = Tenant(
            first_name=draft.first_name,
            last_name=draft.last_name,
            move_in_date=draft.move_in_date,
            move_out_date=draft.move_out_date,
            deposit=draft.deposit,
            email=draft.email,
            number_of_persons=draft.number_of_persons,
            target_cold_rent=draft.target_cold_rent,
            target_ancillary_payment=draft.target_ancillary_payment,
            target_electricity_payment=draft.target_electricity_payment,
            greeting=draft.greeting,
            house_id=house.id,
            apartment_id=apartment.id,
        )
        tenant.house = house
        tenant.apartment = apartment
        self.session.add(tenant)
        self.session.flush()
        logger.info(
            "tenant_created",
            extra={
                "tenant_id": tenant.id,
                "house_id": house.id,
                "apartment_id": apartment.id,
                "move_in_date": draft.move_in_date,
            },
        )
        return self._to_dto(tenant)

    def update(self, tenant_id: int, draft: TenantDraft) -> TenantInfo:
        """
        Replace all fields of an existing tenant.

        Payment records are not touched here; propagating a changed rent or
        person count is the caller's decision.

        Raises:
            TenantNotFoundError: If tenant doesn't exist.
            ApartmentNotFoundError / ApartmentHouseMismatchError /
            HouseNotFoundError: As for create.
        """
        draft.validate()
        tenant = self._get_by_id(tenant_id)
        house, apartment = self._resolve_placement(draft)
        tenant.first_name = draft.first_name
        tenant.last_name = draft.last_name
        tenant.move_in_date = draft.move_in_date
        tenant.move_out_date = draft.move_out_date
        tenant.deposit = draft.deposit
        tenant.email = draft.email
        tenant.number_of_persons = draft.number_of_persons
        tenant.target_cold_rent = draft.target_cold_rent
        tenant.target_ancillary_payment = draft.target_ancillary_payment
        tenant.target_electricity_payment = draft.target_electricity_payment
        tenant.greeting = draft.greeting
        tenant.house = house
        tenant.apartment = apartment
        self.session.flush()
        logger.info("tenant_updated", extra={"tenant_id": tenant.id})
        return self._to_dto(tenant)

    def delete(self, tenant_id: int) -> None:
        """
        Delete a tenant.  Its payment records are retained.

        Raises:
            TenantNotFoundError: If tenant doesn't exist.
        """
        tenant = self._get_by_id(tenant_id)
        self.session.delete(tenant)
        self.session.flush()
        logger.info("tenant_deleted", extra={"tenant_id": tenant_id})
