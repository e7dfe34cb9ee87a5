from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer
from datetime import datetime
import enum

from soho_transport.core.database import Base
from soho_transport.models.user import enum_values


class PlateStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class NumberPlate(Base):
    """A school vehicle, referenced by plate number from users and requests"""
    __tablename__ = "number_plates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate_number = Column(String(20), unique=True, index=True, nullable=False)
    status = Column(
        SQLEnum(PlateStatus, name="plate_status", values_callable=enum_values),
        default=PlateStatus.ACTIVE,
        nullable=False,
    )

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<NumberPlate {self.plate_number} {self.status.value if self.status else None}>"
