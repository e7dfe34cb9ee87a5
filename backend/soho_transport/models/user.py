from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, ForeignKey
from datetime import datetime
import enum

from soho_transport.core.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    PARENT = "Parent"
    DRIVER = "Driver"
    BUS_ASSISTANT = "Bus Assistant"
    TRANSPORT_MANAGER = "Transport Manager"
    SCHOOL_ADMIN = "School Admin"


# Roles that must be assigned to an active number plate
PLATE_BOUND_ROLES = frozenset({UserRole.DRIVER, UserRole.BUS_ASSISTANT})

# School Admin accounts are created by the seed command only
REGISTRABLE_ROLES = frozenset({
    UserRole.PARENT,
    UserRole.DRIVER,
    UserRole.BUS_ASSISTANT,
    UserRole.TRANSPORT_MANAGER,
})


def enum_values(enum_cls):
    """Persist enum values ("Bus Assistant") rather than member names"""
    return [member.value for member in enum_cls]


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone_number = Column(String(20), unique=True, index=True, nullable=False)
    number_plate = Column(
        String(20),
        ForeignKey("number_plates.plate_number", onupdate="CASCADE", ondelete="RESTRICT"),
        nullable=True,
    )
    role = Column(
        SQLEnum(UserRole, name="user_role", values_callable=enum_values),
        nullable=False,
    )
    password_hash = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else None})>"
