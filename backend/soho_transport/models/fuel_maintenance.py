from sqlalchemy import Column, String, Date, DateTime, Enum as SQLEnum, Integer, ForeignKey, Numeric, Text
from datetime import datetime
import enum

from soho_transport.core.database import Base
from soho_transport.models.user import enum_values


class RequestType(str, enum.Enum):
    FUEL = "Fuel"
    SERVICE = "Service"
    REPAIR_AND_MAINTENANCE = "Repair and Maintenance"
    COMPLIANCE = "Compliance"


class RequestCategory(str, enum.Enum):
    FUELS_AND_OILS = "Fuels & Oils"
    BODY_WORKS = "Body Works and Body Parts"
    MECHANICAL = "Mechanical"
    WIRING = "Wiring"
    PUNCTURE_AND_TIRES = "Puncture & Tires"
    INSURANCE = "Insurance"
    RSL = "RSL"
    INSPECTION = "Inspection / Speed Governors"


class Approver(str, enum.Enum):
    """Staff allowed to confirm a requisition"""
    ERICK = "Erick"
    DOUGLAS = "Douglas"
    JAMES = "James"


class FuelMaintenanceRequest(Base):
    """Fuel/maintenance requisition - never updated or deleted"""
    __tablename__ = "fuel_maintenance_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_date = Column(Date, nullable=False)
    number_plate = Column(
        String(20),
        ForeignKey("number_plates.plate_number", onupdate="CASCADE", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    current_mileage = Column(Integer, nullable=False)
    request_type = Column(
        SQLEnum(RequestType, name="request_type", values_callable=enum_values),
        nullable=False,
    )
    requested_by = Column(String(150), nullable=False)
    category = Column(
        SQLEnum(RequestCategory, name="request_category", values_callable=enum_values),
        nullable=False,
    )
    description = Column(Text, nullable=False)
    # Only set for Fuel requests
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    confirmed_by = Column(
        SQLEnum(Approver, name="request_approver", values_callable=enum_values),
        nullable=False,
    )
    created_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<FuelMaintenanceRequest {self.id} {self.number_plate} {self.request_type}>"
