# Re-export all models for convenient imports
from soho_transport.models.user import User, UserRole, PLATE_BOUND_ROLES, REGISTRABLE_ROLES
from soho_transport.models.number_plate import NumberPlate, PlateStatus
from soho_transport.models.student import Student, StudentStatus, ParentContactChange
from soho_transport.models.fuel_maintenance import (
    FuelMaintenanceRequest,
    RequestType,
    RequestCategory,
    Approver,
)

__all__ = [
    # Users
    "User",
    "UserRole",
    "PLATE_BOUND_ROLES",
    "REGISTRABLE_ROLES",
    # Vehicles
    "NumberPlate",
    "PlateStatus",
    # Students
    "Student",
    "StudentStatus",
    "ParentContactChange",
    # Requisitions
    "FuelMaintenanceRequest",
    "RequestType",
    "RequestCategory",
    "Approver",
]
