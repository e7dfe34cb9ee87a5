"""
Custom Exceptions for SOHO School Transport
===========================================

Every service raises errors from its own closed family. Each error carries a
``kind`` drawn from a per-service enum, and the HTTP layer resolves the status
code and public message through ``ERROR_HTTP_MAP`` instead of comparing strings.

Usage:
    from soho_transport.core.exceptions import StudentServiceError, StudentErrorKind

    if not student:
        raise StudentServiceError(StudentErrorKind.STUDENT_NOT_FOUND)
"""

import enum
from typing import Optional, Any, Dict, Tuple, Union


class SohoError(Exception):
    """Base exception for all SOHO errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# ============================================
# Authentication Errors (token layer)
# ============================================

class AuthenticationError(SohoError):
    """User authentication failed"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class TokenExpiredError(AuthenticationError):
    """JWT token has expired"""

    def __init__(self):
        super().__init__("Token has expired")
        self.code = "TOKEN_EXPIRED"


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid"""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
        self.code = "INVALID_TOKEN"


# ============================================
# Service error kinds
# ============================================

class AuthErrorKind(str, enum.Enum):
    DUPLICATE_USER = "DUPLICATE_USER"
    NUMBER_PLATE_REQUIRED = "NUMBER_PLATE_REQUIRED"
    NUMBER_PLATE_NOT_FOUND = "NUMBER_PLATE_NOT_FOUND"


class StudentErrorKind(str, enum.Enum):
    STUDENT_NOT_FOUND = "STUDENT_NOT_FOUND"
    ADMISSION_NUMBER_EXISTS = "ADMISSION_NUMBER_EXISTS"
    STUDENT_ALREADY_WITHDRAWN = "STUDENT_ALREADY_WITHDRAWN"
    PARENT_CONTACT_UNCHANGED = "PARENT_CONTACT_UNCHANGED"
    NO_MASTER_DATA_FIELDS = "NO_MASTER_DATA_FIELDS"


class FuelMaintenanceErrorKind(str, enum.Enum):
    INVALID_REQUEST_TYPE = "INVALID_REQUEST_TYPE"
    INVALID_REQUEST_CATEGORY = "INVALID_REQUEST_CATEGORY"
    INVALID_CONFIRMED_BY = "INVALID_CONFIRMED_BY"
    INVALID_CURRENT_MILEAGE = "INVALID_CURRENT_MILEAGE"
    AMOUNT_REQUIRED_FOR_FUEL = "AMOUNT_REQUIRED_FOR_FUEL"
    INVALID_AMOUNT_FOR_FUEL = "INVALID_AMOUNT_FOR_FUEL"
    REQUEST_CREATOR_NOT_FOUND = "REQUEST_CREATOR_NOT_FOUND"
    DRIVER_NUMBER_PLATE_NOT_ASSIGNED = "DRIVER_NUMBER_PLATE_NOT_ASSIGNED"
    DRIVER_NUMBER_PLATE_MISMATCH = "DRIVER_NUMBER_PLATE_MISMATCH"
    NUMBER_PLATE_NOT_FOUND = "NUMBER_PLATE_NOT_FOUND"


ErrorKind = Union[AuthErrorKind, StudentErrorKind, FuelMaintenanceErrorKind]


# (status code, public message) for every error kind
ERROR_HTTP_MAP: Dict[ErrorKind, Tuple[int, str]] = {
    # Auth
    AuthErrorKind.DUPLICATE_USER: (
        409, "A user with that email or phone number already exists."
    ),
    AuthErrorKind.NUMBER_PLATE_REQUIRED: (
        400, "numberPlate is required for Driver and Bus Assistant."
    ),
    AuthErrorKind.NUMBER_PLATE_NOT_FOUND: (
        400, "Selected number plate is not available. Choose an existing number plate."
    ),
    # Students
    StudentErrorKind.STUDENT_NOT_FOUND: (404, "Student not found."),
    StudentErrorKind.ADMISSION_NUMBER_EXISTS: (
        409, "A student with this admission number already exists."
    ),
    StudentErrorKind.STUDENT_ALREADY_WITHDRAWN: (409, "Student is already withdrawn."),
    StudentErrorKind.PARENT_CONTACT_UNCHANGED: (
        400, "New parent contact must be different from the current one."
    ),
    StudentErrorKind.NO_MASTER_DATA_FIELDS: (
        400, "No master data fields were provided. Submit at least one field to update."
    ),
    # Fuel & maintenance
    FuelMaintenanceErrorKind.INVALID_REQUEST_TYPE: (400, "Invalid request type."),
    FuelMaintenanceErrorKind.INVALID_REQUEST_CATEGORY: (400, "Invalid request category."),
    FuelMaintenanceErrorKind.INVALID_CONFIRMED_BY: (
        400, "confirmedBy must be one of: Erick, Douglas, James."
    ),
    FuelMaintenanceErrorKind.INVALID_CURRENT_MILEAGE: (
        400, "currentMileage must be a non-negative integer."
    ),
    FuelMaintenanceErrorKind.AMOUNT_REQUIRED_FOR_FUEL: (
        400, "amount is required when requestType is Fuel."
    ),
    FuelMaintenanceErrorKind.INVALID_AMOUNT_FOR_FUEL: (
        400, "amount must be greater than zero for Fuel requests."
    ),
    FuelMaintenanceErrorKind.REQUEST_CREATOR_NOT_FOUND: (404, "Request creator was not found."),
    FuelMaintenanceErrorKind.DRIVER_NUMBER_PLATE_NOT_ASSIGNED: (
        400, "No number plate is assigned to this driver account."
    ),
    FuelMaintenanceErrorKind.DRIVER_NUMBER_PLATE_MISMATCH: (
        403, "Drivers can only submit requests for their assigned number plate."
    ),
    FuelMaintenanceErrorKind.NUMBER_PLATE_NOT_FOUND: (
        400, "Selected number plate is not available. Choose an active number plate."
    ),
}


class ServiceError(SohoError):
    """Business rule violation raised by a service"""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.kind = kind
        status_code, public_message = ERROR_HTTP_MAP[kind]
        self.status_code = status_code
        super().__init__(message or public_message, code=kind.value, details=details)


class AuthServiceError(ServiceError):
    """Registration rule violated"""

    def __init__(self, kind: AuthErrorKind, message: Optional[str] = None):
        super().__init__(kind, message)


class StudentServiceError(ServiceError):
    """Student lifecycle rule violated"""

    def __init__(self, kind: StudentErrorKind, message: Optional[str] = None):
        super().__init__(kind, message)


class FuelMaintenanceError(ServiceError):
    """Fuel/maintenance request rule violated"""

    def __init__(self, kind: FuelMaintenanceErrorKind, message: Optional[str] = None):
        super().__init__(kind, message)


# ============================================
# Helper functions for API responses
# ============================================

def error_response(error: ServiceError) -> Dict[str, Any]:
    """Convert a service exception to the public error envelope"""
    _, public_message = ERROR_HTTP_MAP[error.kind]
    return {
        "success": False,
        "message": public_message,
        "code": error.code,
    }
