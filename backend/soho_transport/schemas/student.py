from datetime import date, datetime
from pydantic import Field, field_validator
from typing import Any, Dict, List, Optional

from soho_transport.models.student import StudentStatus
from soho_transport.schemas.common import CamelModel, CamelResponse, clean_date, clean_digits, clean_text

# Fields a School Admin may correct after admission
MASTER_DATA_FIELDS = (
    "admission_number",
    "first_name",
    "last_name",
    "class_name",
    "grade",
    "admission_date",
)


class StudentAdmissionCreate(CamelModel):
    admission_number: str
    first_name: str
    last_name: str
    class_name: str
    grade: str
    parent_contact: str
    admission_date: Optional[date] = None

    @field_validator("admission_number", mode="before")
    @classmethod
    def check_admission_number(cls, v):
        return clean_text(
            v, "admissionNumber", max_length=50,
            length_message="admissionNumber must be between 1 and 50 characters.",
        ).upper()

    @field_validator("first_name", mode="before")
    @classmethod
    def check_first_name(cls, v):
        return clean_text(v, "firstName")

    @field_validator("last_name", mode="before")
    @classmethod
    def check_last_name(cls, v):
        return clean_text(v, "lastName")

    @field_validator("class_name", mode="before")
    @classmethod
    def check_class_name(cls, v):
        return clean_text(v, "className", max_length=100)

    @field_validator("grade", mode="before")
    @classmethod
    def check_grade(cls, v):
        return clean_text(v, "grade", max_length=50)

    @field_validator("parent_contact", mode="before")
    @classmethod
    def check_parent_contact(cls, v):
        return clean_digits(v, "parentContact")

    @field_validator("admission_date", mode="before")
    @classmethod
    def check_admission_date(cls, v):
        return clean_date(v, "admissionDate", required=False)


class ParentContactUpdate(CamelModel):
    parent_contact: str

    @field_validator("parent_contact", mode="before")
    @classmethod
    def check_parent_contact(cls, v):
        return clean_digits(v, "parentContact")


class StudentWithdrawal(CamelModel):
    withdrawal_date: Optional[date] = None
    withdrawal_reason: Optional[str] = None

    @field_validator("withdrawal_date", mode="before")
    @classmethod
    def check_withdrawal_date(cls, v):
        return clean_date(v, "withdrawalDate", required=False)

    @field_validator("withdrawal_reason", mode="before")
    @classmethod
    def check_withdrawal_reason(cls, v):
        return clean_text(
            v, "withdrawalReason", required=False,
            length_message="withdrawalReason must be at most 255 characters.",
        )


class StudentMasterDataUpdate(CamelModel):
    """Partial update; blank values are treated as not provided"""
    admission_number: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    class_name: Optional[str] = None
    grade: Optional[str] = None
    admission_date: Optional[date] = None

    @field_validator("admission_number", mode="before")
    @classmethod
    def check_admission_number(cls, v):
        return clean_text(
            v, "admissionNumber", max_length=50, required=False,
            length_message="admissionNumber must be between 1 and 50 characters.",
        )

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def check_names(cls, v, info):
        field = "firstName" if info.field_name == "first_name" else "lastName"
        return clean_text(v, field, required=False)

    @field_validator("class_name", mode="before")
    @classmethod
    def check_class_name(cls, v):
        return clean_text(v, "className", max_length=100, required=False)

    @field_validator("grade", mode="before")
    @classmethod
    def check_grade(cls, v):
        return clean_text(v, "grade", max_length=50, required=False)

    @field_validator("admission_date", mode="before")
    @classmethod
    def check_admission_date(cls, v):
        return clean_date(v, "admissionDate", required=False)

    def changes(self) -> Dict[str, Any]:
        return {field: getattr(self, field) for field in MASTER_DATA_FIELDS
                if getattr(self, field) is not None}


# ============================================
# Responses
# ============================================

class StudentOut(CamelResponse):
    id: int
    admission_number: str
    first_name: str
    last_name: str
    class_name: str
    grade: str
    parent_contact: str
    admission_date: date
    status: StudentStatus
    withdrawal_date: Optional[date] = None
    withdrawal_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ContactChangeOut(CamelResponse):
    id: int
    student_id: int
    student_name: str
    previous_contact: str
    new_contact: str
    changed_by_user_id: int
    changed_at: datetime


class StudentSummary(CamelResponse):
    total_students: int = 0
    active_students: int = 0
    withdrawn_students: int = 0


class StudentDashboard(CamelResponse):
    students: List[StudentOut] = Field(default_factory=list)
    admissions: List[StudentOut] = Field(default_factory=list)
    withdrawals: List[StudentOut] = Field(default_factory=list)
    parent_contact_changes: List[ContactChangeOut] = Field(default_factory=list)
    summary: StudentSummary = Field(default_factory=StudentSummary)
