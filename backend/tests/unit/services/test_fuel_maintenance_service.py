"""
Unit Tests for FuelMaintenanceService
Tests for: conditional amount rules, plate ownership, listing
"""
import pytest
from datetime import date
from sqlalchemy import select

from soho_transport.core.exceptions import FuelMaintenanceError, FuelMaintenanceErrorKind
from soho_transport.models import FuelMaintenanceRequest, NumberPlate, PlateStatus, RequestType, UserRole
from soho_transport.schemas.fuel_maintenance import FuelMaintenanceRequestCreate
from soho_transport.services.fuel_maintenance_service import (
    _coerce_amount,
    _coerce_mileage,
    fuel_maintenance_service,
)

from conftest import DRIVER_PLATE, make_user


def request_payload(**overrides) -> FuelMaintenanceRequestCreate:
    data = {
        "requestDate": "2024-05-10",
        "numberPlate": DRIVER_PLATE,
        "currentMileage": 120500,
        "requestType": "Fuel",
        "requestedBy": "Otieno",
        "category": "Fuels & Oils",
        "description": "Diesel top-up",
        "amount": 5000,
        "confirmedBy": "Erick",
    }
    data.update(overrides)
    return FuelMaintenanceRequestCreate(**data)


class TestCoercion:
    @pytest.mark.parametrize("value,expected", [(None, None), ("", None), ("  ", None), ("150.5", 150.5), (20, 20.0)])
    def test_coerce_amount(self, value, expected):
        assert _coerce_amount(value) == expected

    @pytest.mark.parametrize("value", ["abc", True, [1]])
    def test_coerce_amount_non_numbers_are_nan(self, value):
        result = _coerce_amount(value)
        assert result != result

    @pytest.mark.parametrize("value,expected", [(0, 0), (1200, 1200), ("1200", 1200), (1200.0, 1200)])
    def test_coerce_mileage(self, value, expected):
        assert _coerce_mileage(value) == expected

    @pytest.mark.parametrize("value", [-1, 12.5, "12.5", "-3", "abc", True])
    def test_coerce_mileage_rejects(self, value):
        with pytest.raises(FuelMaintenanceError) as exc_info:
            _coerce_mileage(value)

        assert exc_info.value.kind == FuelMaintenanceErrorKind.INVALID_CURRENT_MILEAGE


class TestCreateRequest:
    """Test FuelMaintenanceService.create_fuel_maintenance_request"""

    @pytest.mark.asyncio
    async def test_fuel_request_created(self, db_session, driver_user):
        request = await fuel_maintenance_service.create_fuel_maintenance_request(
            db_session, request_payload(), driver_user.id
        )

        assert request.id is not None
        assert request.request_type == RequestType.FUEL
        assert request.amount == 5000.0
        assert request.number_plate == DRIVER_PLATE
        assert request.request_date == date(2024, 5, 10)
        assert request.created_by_user_id == driver_user.id

    @pytest.mark.asyncio
    async def test_amount_rounded_to_cents(self, db_session, driver_user):
        request = await fuel_maintenance_service.create_fuel_maintenance_request(
            db_session, request_payload(amount="1999.999"), driver_user.id
        )
        assert request.amount == 2000.0

    @pytest.mark.asyncio
    async def test_smallest_fuel_amount_accepted(self, db_session, driver_user):
        request = await fuel_maintenance_service.create_fuel_maintenance_request(
            db_session, request_payload(amount=0.01), driver_user.id
        )
        assert request.amount == 0.01

    @pytest.mark.asyncio
    async def test_non_fuel_amount_dropped(self, db_session, driver_user):
        """Any amount sent with a non-Fuel request is stored as NULL"""
        request = await fuel_maintenance_service.create_fuel_maintenance_request(
            db_session,
            request_payload(requestType="Repair and Maintenance", category="Mechanical", amount=12000),
            driver_user.id,
        )

        stored = (await db_session.execute(
            select(FuelMaintenanceRequest.amount).where(FuelMaintenanceRequest.id == request.id)
        )).scalar_one()
        assert stored is None

    @pytest.mark.asyncio
    async def test_non_fuel_invalid_amount_ignored(self, db_session, driver_user):
        request = await fuel_maintenance_service.create_fuel_maintenance_request(
            db_session, request_payload(requestType="Compliance", category="Insurance", amount="n/a"),
            driver_user.id,
        )
        assert request.amount is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [None, ""])
    async def test_fuel_requires_amount(self, db_session, driver_user, amount):
        with pytest.raises(FuelMaintenanceError) as exc_info:
            await fuel_maintenance_service.create_fuel_maintenance_request(
                db_session, request_payload(amount=amount), driver_user.id
            )

        assert exc_info.value.kind == FuelMaintenanceErrorKind.AMOUNT_REQUIRED_FOR_FUEL

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -10, "abc", "inf", 0.001, "0.004"])
    async def test_fuel_amount_must_be_positive(self, db_session, driver_user, amount):
        with pytest.raises(FuelMaintenanceError) as exc_info:
            await fuel_maintenance_service.create_fuel_maintenance_request(
                db_session, request_payload(amount=amount), driver_user.id
            )

        assert exc_info.value.kind == FuelMaintenanceErrorKind.INVALID_AMOUNT_FOR_FUEL

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value,kind", [
        ("requestType", "Tyres", FuelMaintenanceErrorKind.INVALID_REQUEST_TYPE),
        ("category", "Paint", FuelMaintenanceErrorKind.INVALID_REQUEST_CATEGORY),
        ("confirmedBy", "Peter", FuelMaintenanceErrorKind.INVALID_CONFIRMED_BY),
        ("currentMileage", -5, FuelMaintenanceErrorKind.INVALID_CURRENT_MILEAGE),
    ])
    async def test_invalid_choices(self, db_session, driver_user, field, value, kind):
        with pytest.raises(FuelMaintenanceError) as exc_info:
            await fuel_maintenance_service.create_fuel_maintenance_request(
                db_session, request_payload(**{field: value}), driver_user.id
            )

        assert exc_info.value.kind == kind

    @pytest.mark.asyncio
    async def test_unknown_creator(self, db_session, active_plate):
        with pytest.raises(FuelMaintenanceError) as exc_info:
            await fuel_maintenance_service.create_fuel_maintenance_request(db_session, request_payload(), 9999)

        assert exc_info.value.kind == FuelMaintenanceErrorKind.REQUEST_CREATOR_NOT_FOUND

    @pytest.mark.asyncio
    async def test_driver_without_plate(self, db_session, active_plate):
        driver = await make_user(db_session, UserRole.DRIVER)

        with pytest.raises(FuelMaintenanceError) as exc_info:
            await fuel_maintenance_service.create_fuel_maintenance_request(db_session, request_payload(), driver.id)

        assert exc_info.value.kind == FuelMaintenanceErrorKind.DRIVER_NUMBER_PLATE_NOT_ASSIGNED

    @pytest.mark.asyncio
    async def test_driver_plate_mismatch(self, db_session, driver_user):
        db_session.add(NumberPlate(plate_number="KBB 456B", status=PlateStatus.ACTIVE))
        await db_session.commit()

        with pytest.raises(FuelMaintenanceError) as exc_info:
            await fuel_maintenance_service.create_fuel_maintenance_request(
                db_session, request_payload(numberPlate="KBB 456B"), driver_user.id
            )

        assert exc_info.value.kind == FuelMaintenanceErrorKind.DRIVER_NUMBER_PLATE_MISMATCH

    @pytest.mark.asyncio
    async def test_plate_deactivated_after_assignment(self, db_session, driver_user, active_plate):
        active_plate.status = PlateStatus.INACTIVE
        await db_session.commit()

        with pytest.raises(FuelMaintenanceError) as exc_info:
            await fuel_maintenance_service.create_fuel_maintenance_request(
                db_session, request_payload(), driver_user.id
            )

        assert exc_info.value.kind == FuelMaintenanceErrorKind.NUMBER_PLATE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_manager_may_use_any_active_plate(self, db_session, active_plate):
        manager = await make_user(db_session, UserRole.TRANSPORT_MANAGER)

        request = await fuel_maintenance_service.create_fuel_maintenance_request(
            db_session, request_payload(), manager.id
        )
        assert request.created_by_user_id == manager.id


class TestListRequests:
    """Test FuelMaintenanceService.list_fuel_maintenance_requests_by_user"""

    @pytest.mark.asyncio
    async def test_lists_own_requests_newest_first(self, db_session, driver_user):
        driver_id = driver_user.id
        for request_date in ("2024-03-01", "2024-05-01", "2024-04-01"):
            await fuel_maintenance_service.create_fuel_maintenance_request(
                db_session, request_payload(requestDate=request_date), driver_id
            )

        requests = await fuel_maintenance_service.list_fuel_maintenance_requests_by_user(db_session, driver_id)

        assert [r.request_date for r in requests] == [date(2024, 5, 1), date(2024, 4, 1), date(2024, 3, 1)]

    @pytest.mark.asyncio
    async def test_other_users_requests_excluded(self, db_session, driver_user, active_plate):
        manager = await make_user(db_session, UserRole.TRANSPORT_MANAGER)
        await fuel_maintenance_service.create_fuel_maintenance_request(db_session, request_payload(), manager.id)

        assert await fuel_maintenance_service.list_fuel_maintenance_requests_by_user(db_session, driver_user.id) == []
