from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from soho_transport.api.responses import envelope
from soho_transport.core.database import get_db
from soho_transport.modules.auth.dependencies import require_driver
from soho_transport.schemas.auth import TokenClaims
from soho_transport.schemas.fuel_maintenance import FuelMaintenanceRequestCreate, FuelMaintenanceRequestOut
from soho_transport.services.fuel_maintenance_service import fuel_maintenance_service

router = APIRouter()


@router.get("/requests")
async def get_requests(
    claims: TokenClaims = Depends(require_driver),
    db: AsyncSession = Depends(get_db),
):
    """Requests raised by the current driver, newest first"""
    requests = await fuel_maintenance_service.list_fuel_maintenance_requests_by_user(db, claims.user_id)
    return envelope(
        "Fuel and maintenance requests retrieved successfully.",
        {"requests": [FuelMaintenanceRequestOut.model_validate(r).to_json() for r in requests]},
    )


@router.post("/requests", status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: FuelMaintenanceRequestCreate,
    claims: TokenClaims = Depends(require_driver),
    db: AsyncSession = Depends(get_db),
):
    request = await fuel_maintenance_service.create_fuel_maintenance_request(db, payload, claims.user_id)
    return envelope(
        "Fuel and maintenance request created successfully.",
        {"request": FuelMaintenanceRequestOut.model_validate(request).to_json()},
    )
