"""
Service layer for Apartment operations.

An apartment always belongs to an existing house; the house is checked on
create and on update.
"""

from __future__ import annotations

from sqlalchemy import select

from property_kernel.domain.dtos import ApartmentDraft, ApartmentInfo
from property_kernel.exceptions import ApartmentNotFoundError, HouseNotFoundError
from property_kernel.logging_config import get_logger
from property_kernel.models.apartment import Apartment
from property_kernel.models.house import House
from property_kernel.services.base import BaseService

logger = get_logger("services.apartment")


class ApartmentService(BaseService[Apartment]):
    """Service for managing apartments.  Returns ApartmentInfo DTOs."""

    def _to_dto(self, apartment: Apartment) -> ApartmentInfo:
        return ApartmentInfo.from_model(apartment)

    def _get_by_id(self, apartment_id: int) -> Apartment:
        """Get apartment by ID, raising if not found."""
        apartment = self.session.get(Apartment, apartment_id)
        if apartment is None:
            raise ApartmentNotFoundError(apartment_id)
        return apartment

    def _require_house(self, house_id: int) -> House:
        house = self.session.get(House, house_id)
        if house is None:
            raise HouseNotFoundError(house_id)
        return house

    def get_by_id(self, apartment_id: int) -> ApartmentInfo:
        """
        Get apartment by ID.

        Raises:
            ApartmentNotFoundError: If apartment doesn't exist.
        """
        return self._to_dto(self._get_by_id(apartment_id))

    def list_all(self) -> list[ApartmentInfo]:
        stmt = select(Apartment).order_by(Apartment.house_id, Apartment.name, Apartment.id)
        return [self._to_dto(a) for a in self.session.execute(stmt).scalars().all()]

    def list_by_house(self, house_id: int) -> list[ApartmentInfo]:
        stmt = (
            select(Apartment)
            .where(Apartment.house_id == house_id)
            .order_by(Apartment.name, Apartment.id)
        )
        return [self._to_dto(a) for a in self.session.execute(stmt).scalars().all()]

    def create(self, draft: ApartmentDraft) -> ApartmentInfo:
        """
        Create a new apartment in an existing house.

        Raises:
            HouseNotFoundError: If the house doesn't exist.
        """
        draft.validate()
        house = self._require_house(draft.house_id)
        apartment = Apartment(name=draft.name, house_id=house.id, size=draft.size)
        apartment.house = house
        self.session.add(apartment)
        self.session.flush()
        logger.info(
            "apartment_created",
            extra={"apartment_id": apartment.id, "house_id": house.id},
        )
        return self._to_dto(apartment)

    def update(self, apartment_id: int, draft: ApartmentDraft) -> ApartmentInfo:
        """
        Replace all fields of an existing apartment.

        Raises:
            ApartmentNotFoundError: If apartment doesn't exist.
            HouseNotFoundError: If the new house doesn't exist.
        """
        draft.validate()
        apartment = self._get_by_id(apartment_id)
        house = self._require_house(draft.house_id)
        apartment.name = draft.name
        apartment.house = house
        apartment.size = draft.size
        self.session.flush()
        logger.info("apartment_updated", extra={"apartment_id": apartment.id})
        return self._to_dto(apartment)

    def delete(self, apartment_id: int) -> None:
        """
        Delete an apartment.

        Raises:
            ApartmentNotFoundError: If apartment doesn't exist.
        """
        apartment = self._get_by_id(apartment_id)
        self.session.delete(apartment)
        self.session.flush()
        logger.info("apartment_deleted", extra={"apartment_id": apartment_id})
