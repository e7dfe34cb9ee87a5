from sqlalchemy import Column, String, Date, DateTime, Enum as SQLEnum, Integer, ForeignKey
from datetime import datetime
import enum

from soho_transport.core.database import Base
from soho_transport.models.user import enum_values


class StudentStatus(str, enum.Enum):
    """Student lifecycle: active -> withdrawn (terminal)"""
    ACTIVE = "active"
    WITHDRAWN = "withdrawn"


class Student(Base):
    """Student model - never deleted, only withdrawn"""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admission_number = Column(String(50), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    class_name = Column(String(100), nullable=False)
    grade = Column(String(50), nullable=False)
    parent_contact = Column(String(100), nullable=False)
    admission_date = Column(Date, nullable=False)

    status = Column(
        SQLEnum(StudentStatus, name="student_status", values_callable=enum_values),
        default=StudentStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    withdrawal_date = Column(Date, nullable=True)
    withdrawal_reason = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Student {self.admission_number}>"


class ParentContactChange(Base):
    """Append-only audit record of a parent contact change"""
    __tablename__ = "parent_contact_changes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True)
    previous_contact = Column(String(100), nullable=False)
    new_contact = Column(String(100), nullable=False)
    changed_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    changed_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<ParentContactChange student={self.student_id}>"
