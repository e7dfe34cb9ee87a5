from datetime import date, datetime
from pydantic import field_validator
from typing import Any, Optional

from soho_transport.models.fuel_maintenance import Approver, RequestCategory, RequestType
from soho_transport.schemas.auth import clean_number_plate
from soho_transport.schemas.common import CamelModel, CamelResponse, clean_date, clean_text, is_blank


class FuelMaintenanceRequestCreate(CamelModel):
    """
    Shape checks only. requestType, category and confirmedBy membership,
    mileage range and the Fuel amount rule are enforced by the service.
    """
    request_date: date
    number_plate: str
    current_mileage: Any
    request_type: str
    requested_by: str
    category: str
    description: str
    amount: Optional[Any] = None
    confirmed_by: str

    @field_validator("request_date", mode="before")
    @classmethod
    def check_request_date(cls, v):
        return clean_date(v, "requestDate", message="requestDate must be a valid date (YYYY-MM-DD).")

    @field_validator("number_plate", mode="before")
    @classmethod
    def check_number_plate(cls, v):
        if is_blank(v):
            raise ValueError("numberPlate is required.")
        return clean_number_plate(v)

    @field_validator("current_mileage", mode="before")
    @classmethod
    def check_current_mileage(cls, v):
        if is_blank(v):
            raise ValueError("currentMileage is required.")
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            raise ValueError("currentMileage must be a non-negative integer.")
        return v.strip() if isinstance(v, str) else v

    @field_validator("request_type", mode="before")
    @classmethod
    def check_request_type(cls, v):
        return clean_text(v, "requestType")

    @field_validator("requested_by", mode="before")
    @classmethod
    def check_requested_by(cls, v):
        return clean_text(v, "requestedBy")

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, v):
        return clean_text(v, "category")

    @field_validator("description", mode="before")
    @classmethod
    def check_description(cls, v):
        return clean_text(v, "description", max_length=2000)

    @field_validator("confirmed_by", mode="before")
    @classmethod
    def check_confirmed_by(cls, v):
        return clean_text(v, "confirmedBy")


class FuelMaintenanceRequestOut(CamelResponse):
    id: int
    request_date: date
    number_plate: str
    current_mileage: int
    request_type: RequestType
    requested_by: str
    category: RequestCategory
    description: str
    amount: Optional[float] = None
    confirmed_by: Approver
    created_by_user_id: int
    created_at: datetime
    updated_at: datetime
