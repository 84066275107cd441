"""
Service layer for House operations.

Returns HouseInfo DTOs instead of ORM entities.
"""

from __future__ import annotations

from sqlalchemy import select

from property_kernel.domain.dtos import HouseDraft, HouseInfo
from property_kernel.exceptions import HouseNotFoundError
from property_kernel.logging_config import get_logger
from property_kernel.models.house import House
from property_kernel.services.base import BaseService

logger = get_logger("services.house")


class HouseService(BaseService[House]):
    """
    Service for managing houses.

    All public methods return HouseInfo DTOs, not ORM House entities.
    """

    def _to_dto(self, house: House) -> HouseInfo:
        """Convert ORM House to HouseInfo DTO."""
        return HouseInfo.from_model(house)

    def _get_by_id(self, house_id: int) -> House:
        """Get house by ID, raising if not found."""
        house = self.session.get(House, house_id)
        if house is None:
            raise HouseNotFoundError(house_id)
        return house

    def exists(self, house_id: int) -> bool:
        return self.session.get(House, house_id) is not None

    def get_by_id(self, house_id: int) -> HouseInfo:
        """
        Get house by ID.

        Raises:
            HouseNotFoundError: If house doesn't exist.
        """
        return self._to_dto(self._get_by_id(house_id))

    def list_all(self) -> list[HouseInfo]:
        """All houses ordered by name."""
        stmt = select(House).order_by(House.name, House.id)
        return [self._to_dto(h) for h in self.session.execute(stmt).scalars().all()]

    def create(self, draft: HouseDraft) -> HouseInfo:
        """
        Create a new house.

        Args:
            draft: Validated house fields (re-validated here).

        Returns:
            Created HouseInfo DTO.
        """
        draft.validate()
        house = House(
            name=draft.name,
            street=draft.street,
            number=draft.number,
            country=draft.country,
            zip_code=draft.zip_code,
            city=draft.city,
        )
        self.session.add(house)
        self.session.flush()
        logger.info("house_created", extra={"house_id": house.id, "house_name": house.name})
        return self._to_dto(house)

    def update(self, house_id: int, draft: HouseDraft) -> HouseInfo:
        """
        Replace all fields of an existing house.

        Raises:
            HouseNotFoundError: If house doesn't exist.
        """
        draft.validate()
        house = self._get_by_id(house_id)
        house.name = draft.name
        house.street = draft.street
        house.number = draft.number
        house.country = draft.country
        house.zip_code = draft.zip_code
        house.city = draft.city
        self.session.flush()
        logger.info("house_updated", extra={"house_id": house.id})
        return self._to_dto(house)

    def delete(self, house_id: int) -> None:
        """
        Delete a house.  Apartments and tenants referencing it are not
        touched.

        Raises:
            HouseNotFoundError: If house doesn't exist.
        """
        house = self._get_by_id(house_id)
        self.session.delete(house)
        self.session.flush()
        logger.info("house_deleted", extra={"house_id": house_id})
