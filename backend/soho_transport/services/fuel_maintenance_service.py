"""
Fuel & Maintenance Service - vehicle requisitions raised by drivers

Handles:
- Request creation with conditional amount rules and plate checks
- Listing of a user's own requests
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Any, List, Optional, Type, TypeVar
import enum
import math

from soho_transport.core.exceptions import FuelMaintenanceError, FuelMaintenanceErrorKind
from soho_transport.core.logging_config import logger
from soho_transport.models.fuel_maintenance import (
    Approver,
    FuelMaintenanceRequest,
    RequestCategory,
    RequestType,
)
from soho_transport.models.number_plate import NumberPlate, PlateStatus
from soho_transport.models.user import User, UserRole
from soho_transport.schemas.fuel_maintenance import FuelMaintenanceRequestCreate

REQUEST_LIST_LIMIT = 200

E = TypeVar("E", bound=enum.Enum)


def _parse_choice(enum_cls: Type[E], value: Any, kind: FuelMaintenanceErrorKind) -> E:
    try:
        return enum_cls(str(value or "").strip())
    except ValueError:
        raise FuelMaintenanceError(kind)


def _coerce_amount(value: Any) -> Optional[float]:
    """None for missing/blank, NaN for anything that is not a number"""
    if value is None or isinstance(value, bool):
        return None if value is None else math.nan
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _coerce_mileage(value: Any) -> int:
    if isinstance(value, bool):
        raise FuelMaintenanceError(FuelMaintenanceErrorKind.INVALID_CURRENT_MILEAGE)
    if isinstance(value, float):
        if not value.is_integer():
            raise FuelMaintenanceError(FuelMaintenanceErrorKind.INVALID_CURRENT_MILEAGE)
        value = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise FuelMaintenanceError(FuelMaintenanceErrorKind.INVALID_CURRENT_MILEAGE)
        value = int(text)
    elif not isinstance(value, int):
        raise FuelMaintenanceError(FuelMaintenanceErrorKind.INVALID_CURRENT_MILEAGE)

    if value < 0:
        raise FuelMaintenanceError(FuelMaintenanceErrorKind.INVALID_CURRENT_MILEAGE)
    return value


class FuelMaintenanceService:
    """Service for fuel and maintenance requisitions"""

    async def create_fuel_maintenance_request(
        self,
        db: AsyncSession,
        payload: FuelMaintenanceRequestCreate,
        created_by_user_id: int,
    ) -> FuelMaintenanceRequest:
        """
        Create a requisition.

        Rules:
        - requestType, category and confirmedBy must be known values
        - Fuel requests need a finite amount greater than zero; any other
          type stores amount as NULL
        - A Driver may only submit for the plate assigned to their account
        - The plate must exist and be active

        Raises:
            FuelMaintenanceError
        """
        number_plate = payload.number_plate.strip().upper()
        request_type = _parse_choice(RequestType, payload.request_type,
                                     FuelMaintenanceErrorKind.INVALID_REQUEST_TYPE)
        category = _parse_choice(RequestCategory, payload.category,
                                 FuelMaintenanceErrorKind.INVALID_REQUEST_CATEGORY)
        confirmed_by = _parse_choice(Approver, payload.confirmed_by,
                                     FuelMaintenanceErrorKind.INVALID_CONFIRMED_BY)
        current_mileage = _coerce_mileage(payload.current_mileage)

        amount = _coerce_amount(payload.amount)
        if request_type == RequestType.FUEL:
            if amount is None:
                raise FuelMaintenanceError(FuelMaintenanceErrorKind.AMOUNT_REQUIRED_FOR_FUEL)
            if not math.isfinite(amount):
                raise FuelMaintenanceError(FuelMaintenanceErrorKind.INVALID_AMOUNT_FOR_FUEL)
            # stored to the cent
            amount = round(amount, 2)
            if amount <= 0:
                raise FuelMaintenanceError(FuelMaintenanceErrorKind.INVALID_AMOUNT_FOR_FUEL)
        else:
            amount = None

        result = await db.execute(
            select(User.id, User.role, User.number_plate).where(User.id == created_by_user_id)
        )
        creator = result.first()
        if creator is None:
            raise FuelMaintenanceError(FuelMaintenanceErrorKind.REQUEST_CREATOR_NOT_FOUND)

        if creator.role == UserRole.DRIVER:
            assigned_plate = (creator.number_plate or "").strip().upper()
            if not assigned_plate:
                raise FuelMaintenanceError(FuelMaintenanceErrorKind.DRIVER_NUMBER_PLATE_NOT_ASSIGNED)
            if assigned_plate != number_plate:
                logger.warning(
                    f"Driver {created_by_user_id} submitted a request for {number_plate}, "
                    f"assigned plate is {assigned_plate}"
                )
                raise FuelMaintenanceError(FuelMaintenanceErrorKind.DRIVER_NUMBER_PLATE_MISMATCH)

        plate_result = await db.execute(
            select(NumberPlate.id).where(
                NumberPlate.plate_number == number_plate,
                NumberPlate.status == PlateStatus.ACTIVE,
            )
        )
        if plate_result.first() is None:
            raise FuelMaintenanceError(FuelMaintenanceErrorKind.NUMBER_PLATE_NOT_FOUND)

        request = FuelMaintenanceRequest(
            request_date=payload.request_date,
            number_plate=number_plate,
            current_mileage=current_mileage,
            request_type=request_type,
            requested_by=payload.requested_by.strip(),
            category=category,
            description=payload.description.strip(),
            amount=amount,
            confirmed_by=confirmed_by,
            created_by_user_id=created_by_user_id,
        )
        db.add(request)
        await db.commit()
        await db.refresh(request)

        logger.log_business_event(
            "fuel_maintenance_request_created",
            fuel_request_id=request.id,
            number_plate=number_plate,
            request_type=request_type.value,
        )
        return request

    async def list_fuel_maintenance_requests_by_user(
        self,
        db: AsyncSession,
        created_by_user_id: int,
    ) -> List[FuelMaintenanceRequest]:
        """Newest request date first, at most REQUEST_LIST_LIMIT rows"""
        result = await db.execute(
            select(FuelMaintenanceRequest)
            .where(FuelMaintenanceRequest.created_by_user_id == created_by_user_id)
            .order_by(FuelMaintenanceRequest.request_date.desc(), FuelMaintenanceRequest.id.desc())
            .limit(REQUEST_LIST_LIMIT)
        )
        return list(result.scalars().all())


fuel_maintenance_service = FuelMaintenanceService()
