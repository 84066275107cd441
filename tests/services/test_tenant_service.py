"""
Tests for TenantService: placement checks, listings and activity.
"""

from datetime import date
from decimal import Decimal

import pytest

from property_kernel.domain.dtos import ApartmentDraft
from property_kernel.exceptions import (
    ApartmentHouseMismatchError,
    ApartmentNotFoundError,
    InvalidRangeError,
    TenantNotFoundError,
)
from tests.conftest import house_draft, tenant_draft


@pytest.fixture
def other_house_apartment(house_service, apartment_service):
    other = house_service.create(house_draft(name="Ahornhof"))
    return apartment_service.create(
        ApartmentDraft(name="Ground floor", house_id=other.id, size=Decimal("55"))
    )


class TestCreate:
    def test_create(self, tenant_service, house, apartment):
        info = tenant_service.create(tenant_draft(house.id, apartment.id))
        assert info.full_name == "Erika Mustermann"
        assert info.house.id == house.id
        assert info.apartment.id == apartment.id
        assert info.target_cold_rent == Decimal("800")
        assert tenant_service.exists(info.id)

    def test_unknown_apartment(self, tenant_service, house):
        with pytest.raises(ApartmentNotFoundError):
            tenant_service.create(tenant_draft(house.id, 99))

    def test_apartment_in_other_house(self, tenant_service, house, other_house_apartment):
        with pytest.raises(ApartmentHouseMismatchError) as exc_info:
            tenant_service.create(tenant_draft(house.id, other_house_apartment.id))
        assert exc_info.value.actual_house_id == other_house_apartment.house_id
        assert tenant_service.list_all() == []

    def test_move_out_not_after_move_in(self, tenant_service, house, apartment):
        with pytest.raises(InvalidRangeError):
            tenant_service.create(
                tenant_draft(
                    house.id,
                    apartment.id,
                    move_in_date=date(2023, 3, 1),
                    move_out_date=date(2023, 2, 1),
                )
            )


class TestListings:
    def test_ordered_by_name(self, tenant_service, make_tenant):
        make_tenant(first_name="Max", last_name="Weber")
        make_tenant(first_name="Anna", last_name="Becker")
        make_tenant(first_name="Zoe", last_name="Becker")
        names = [t.full_name for t in tenant_service.list_all()]
        assert names == ["Anna Becker", "Zoe Becker", "Max Weber"]

    def test_by_house_and_apartment(
        self, tenant_service, make_tenant, house, apartment, other_house_apartment
    ):
        mine = make_tenant()
        theirs = tenant_service.create(
            tenant_draft(
                other_house_apartment.house_id,
                other_house_apartment.id,
                last_name="Schulz",
            )
        )
        assert [t.id for t in tenant_service.list_by_house(house.id)] == [mine.id]
        assert [t.id for t in tenant_service.list_by_apartment(other_house_apartment.id)] == [
            theirs.id
        ]

    def test_active_uses_clock_today(self, tenant_service, make_tenant):
        staying = make_tenant(last_name="Active")
        make_tenant(last_name="Gone", move_out_date=date(2023, 3, 31))
        leaving_later = make_tenant(last_name="Leaving", move_out_date=date(2023, 6, 30))

        active_ids = {t.id for t in tenant_service.list_active()}
        assert active_ids == {staying.id, leaving_later.id}

    def test_move_out_on_reference_date_is_inactive(self, tenant_service, make_tenant):
        make_tenant(move_out_date=date(2023, 4, 15))
        assert tenant_service.list_active(as_of=date(2023, 4, 15)) == []
        assert len(tenant_service.list_active(as_of=date(2023, 4, 14))) == 1

    def test_current_by_house(self, tenant_service, make_tenant, house):
        current = make_tenant(last_name="Current")
        make_tenant(last_name="Former", move_out_date=date(2023, 2, 28))
        assert [t.id for t in tenant_service.list_current_by_house(house.id)] == [current.id]


class TestUpdateDelete:
    def test_update_replaces_fields(self, tenant_service, tenant, house, apartment):
        updated = tenant_service.update(
            tenant.id,
            tenant_draft(
                house.id,
                apartment.id,
                target_cold_rent=Decimal("850"),
                number_of_persons=3,
                email=None,
            ),
        )
        assert updated.target_cold_rent == Decimal("850")
        assert updated.number_of_persons == 3
        assert updated.email is None

    def test_update_unknown(self, tenant_service, house, apartment):
        with pytest.raises(TenantNotFoundError):
            tenant_service.update(99, tenant_draft(house.id, apartment.id))

    def test_update_checks_placement(self, tenant_service, tenant, house, other_house_apartment):
        with pytest.raises(ApartmentHouseMismatchError):
            tenant_service.update(tenant.id, tenant_draft(house.id, other_house_apartment.id))

    def test_delete(self, tenant_service, tenant):
        tenant_service.delete(tenant.id)
        assert not tenant_service.exists(tenant.id)
        with pytest.raises(TenantNotFoundError):
            tenant_service.delete(tenant.id)
