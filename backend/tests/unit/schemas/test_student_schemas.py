"""
Unit Tests for Student Schemas
"""
import pytest
from datetime import date
from pydantic import ValidationError

from soho_transport.schemas.student import (
    ParentContactUpdate,
    StudentAdmissionCreate,
    StudentMasterDataUpdate,
    StudentWithdrawal,
)


def admission(**overrides) -> dict:
    data = {
        "admissionNumber": "adm-001",
        "firstName": "Amani",
        "lastName": "Mwangi",
        "className": "Blue",
        "grade": "Grade 3",
        "parentContact": "0712345678",
    }
    data.update(overrides)
    return data


class TestStudentAdmissionCreate:
    def test_admission_number_uppercased(self):
        payload = StudentAdmissionCreate(**admission())
        assert payload.admission_number == "ADM-001"

    def test_admission_date_optional(self):
        assert StudentAdmissionCreate(**admission()).admission_date is None

    def test_admission_date_parsed(self):
        payload = StudentAdmissionCreate(**admission(admissionDate="2024-01-08"))
        assert payload.admission_date == date(2024, 1, 8)

    def test_admission_date_from_datetime_string(self):
        payload = StudentAdmissionCreate(**admission(admissionDate="2024-01-08T09:30:00Z"))
        assert payload.admission_date == date(2024, 1, 8)

    def test_invalid_admission_date(self):
        with pytest.raises(ValidationError) as exc_info:
            StudentAdmissionCreate(**admission(admissionDate="08/01/2024"))

        assert "admissionDate must be a valid date." in str(exc_info.value)

    def test_admission_number_too_long(self):
        with pytest.raises(ValidationError) as exc_info:
            StudentAdmissionCreate(**admission(admissionNumber="A" * 51))

        assert "admissionNumber must be between 1 and 50 characters." in str(exc_info.value)

    @pytest.mark.parametrize("field", ["firstName", "lastName", "className", "grade", "parentContact"])
    def test_required_fields(self, field):
        data = admission()
        data.pop(field)

        with pytest.raises(ValidationError):
            StudentAdmissionCreate(**data)

    def test_parent_contact_digits_only(self):
        with pytest.raises(ValidationError) as exc_info:
            StudentAdmissionCreate(**admission(parentContact="07-1234-5678"))

        assert "parentContact must contain numbers only." in str(exc_info.value)

    @pytest.mark.parametrize("contact,message", [
        ("0" * 25, "parentContact length is invalid."),
        ("0712-345678-0712-345678-9", "parentContact must contain numbers only."),
    ])
    def test_long_parent_contact(self, contact, message):
        with pytest.raises(ValidationError) as exc_info:
            ParentContactUpdate(parentContact=contact)

        assert message in str(exc_info.value)
        assert "too long" not in str(exc_info.value)


class TestParentContactUpdate:
    def test_trimmed(self):
        assert ParentContactUpdate(parentContact=" 0722000111 ").parent_contact == "0722000111"

    def test_blank_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            ParentContactUpdate(parentContact="  ")

        assert "parentContact is required." in str(exc_info.value)


class TestStudentWithdrawal:
    def test_all_optional(self):
        payload = StudentWithdrawal()
        assert payload.withdrawal_date is None
        assert payload.withdrawal_reason is None

    def test_blank_reason_is_none(self):
        assert StudentWithdrawal(withdrawalReason="   ").withdrawal_reason is None

    def test_reason_length_checked(self):
        with pytest.raises(ValidationError) as exc_info:
            StudentWithdrawal(withdrawalReason="x" * 256)

        assert "withdrawalReason must be at most 255 characters." in str(exc_info.value)


class TestStudentMasterDataUpdate:
    def test_changes_skip_missing_and_blank(self):
        payload = StudentMasterDataUpdate(firstName="  ", grade="Grade 5", className=None)
        assert payload.changes() == {"grade": "Grade 5"}

    def test_unknown_fields_ignored(self):
        payload = StudentMasterDataUpdate(parentContact="0712345678", status="withdrawn")
        assert payload.changes() == {}

    def test_changes_use_model_field_names(self):
        payload = StudentMasterDataUpdate(admissionNumber="adm-9", admissionDate="2023-09-01")
        assert payload.changes() == {
            "admission_number": "adm-9",
            "admission_date": date(2023, 9, 1),
        }
