from soho_transport.schemas.auth import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    RegisteredUser,
    AuthenticatedUser,
    AuthSession,
    TokenClaims,
    NumberPlateList,
)
from soho_transport.schemas.student import (
    StudentAdmissionCreate,
    ParentContactUpdate,
    StudentWithdrawal,
    StudentMasterDataUpdate,
    StudentOut,
    ContactChangeOut,
    StudentDashboard,
)
from soho_transport.schemas.fuel_maintenance import (
    FuelMaintenanceRequestCreate,
    FuelMaintenanceRequestOut,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "RefreshTokenRequest",
    "RegisteredUser",
    "AuthenticatedUser",
    "AuthSession",
    "TokenClaims",
    "NumberPlateList",
    "StudentAdmissionCreate",
    "ParentContactUpdate",
    "StudentWithdrawal",
    "StudentMasterDataUpdate",
    "StudentOut",
    "ContactChangeOut",
    "StudentDashboard",
    "FuelMaintenanceRequestCreate",
    "FuelMaintenanceRequestOut",
]
