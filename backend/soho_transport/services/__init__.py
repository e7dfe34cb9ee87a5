from soho_transport.services.auth_service import AuthService, auth_service
from soho_transport.services.student_service import StudentService, student_service
from soho_transport.services.fuel_maintenance_service import (
    FuelMaintenanceService,
    fuel_maintenance_service,
)

__all__ = [
    "AuthService",
    "auth_service",
    "StudentService",
    "student_service",
    "FuelMaintenanceService",
    "fuel_maintenance_service",
]
