"""
Student Service - admissions, withdrawals and record corrections

Handles:
- School Admin dashboard aggregate
- Admission creation
- Parent contact change (row-locked, audited, single transaction)
- Withdrawal (active -> withdrawn, terminal)
- Partial master data update
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import date
from typing import Any, Dict, Optional

from soho_transport.core.exceptions import StudentErrorKind, StudentServiceError
from soho_transport.core.logging_config import logger
from soho_transport.models.student import ParentContactChange, Student, StudentStatus
from soho_transport.schemas.student import (
    MASTER_DATA_FIELDS,
    ContactChangeOut,
    StudentAdmissionCreate,
    StudentDashboard,
    StudentOut,
    StudentSummary,
)

RECENT_CONTACT_CHANGES_LIMIT = 100


def _normalize_master_value(field: str, value: Any) -> Any:
    if isinstance(value, date):
        return value
    value = str(value).strip()
    if field == "admission_number":
        return value.upper()
    if field == "admission_date" and value:
        return date.fromisoformat(value)
    return value


class StudentService:
    """Service for the student register"""

    async def get_student(self, db: AsyncSession, student_id: int) -> Optional[Student]:
        result = await db.execute(select(Student).where(Student.id == student_id))
        return result.scalar_one_or_none()

    async def _require_student(self, db: AsyncSession, student_id: int) -> Student:
        student = await self.get_student(db, student_id)
        if not student:
            raise StudentServiceError(StudentErrorKind.STUDENT_NOT_FOUND)
        return student

    async def _admission_number_taken(self, db: AsyncSession, admission_number: str,
                                      exclude_id: Optional[int] = None) -> bool:
        query = select(Student.id).where(Student.admission_number == admission_number)
        if exclude_id is not None:
            query = query.where(Student.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.first() is not None

    async def list_students_dashboard_data(self, db: AsyncSession) -> StudentDashboard:
        """All students plus the most recent parent contact changes"""
        result = await db.execute(
            select(Student).order_by(Student.admission_date.desc(), Student.id.desc())
        )
        students = [StudentOut.model_validate(s) for s in result.scalars().all()]

        changes_result = await db.execute(
            select(ParentContactChange, Student.first_name, Student.last_name)
            .join(Student, Student.id == ParentContactChange.student_id)
            .order_by(ParentContactChange.changed_at.desc(), ParentContactChange.id.desc())
            .limit(RECENT_CONTACT_CHANGES_LIMIT)
        )
        contact_changes = [
            ContactChangeOut(
                id=change.id,
                student_id=change.student_id,
                student_name=f"{first_name} {last_name}".strip(),
                previous_contact=change.previous_contact,
                new_contact=change.new_contact,
                changed_by_user_id=change.changed_by_user_id,
                changed_at=change.changed_at,
            )
            for change, first_name, last_name in changes_result.all()
        ]

        admissions = [s for s in students if s.status == StudentStatus.ACTIVE]
        withdrawals = [s for s in students if s.status == StudentStatus.WITHDRAWN]

        return StudentDashboard(
            students=students,
            admissions=admissions,
            withdrawals=withdrawals,
            parent_contact_changes=contact_changes,
            summary=StudentSummary(
                total_students=len(students),
                active_students=len(admissions),
                withdrawn_students=len(withdrawals),
            ),
        )

    async def create_student_admission(self, db: AsyncSession, payload: StudentAdmissionCreate) -> Student:
        """
        Admit a student.

        Raises:
            StudentServiceError: ADMISSION_NUMBER_EXISTS
        """
        admission_number = payload.admission_number.strip().upper()

        if await self._admission_number_taken(db, admission_number):
            raise StudentServiceError(StudentErrorKind.ADMISSION_NUMBER_EXISTS)

        student = Student(
            admission_number=admission_number,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            class_name=payload.class_name.strip(),
            grade=payload.grade.strip(),
            parent_contact=payload.parent_contact.strip(),
            admission_date=payload.admission_date or date.today(),
            status=StudentStatus.ACTIVE,
            withdrawal_date=None,
            withdrawal_reason=None,
        )
        db.add(student)
        await db.commit()
        await db.refresh(student)

        logger.log_business_event("student_admitted", student_id=student.id,
                                  admission_number=admission_number)
        return student

    async def update_student_parent_contact(
        self,
        db: AsyncSession,
        student_id: int,
        parent_contact: str,
        changed_by_user_id: int,
    ) -> Student:
        """
        Change a student's parent contact and record the change.

        The student row is locked (SELECT ... FOR UPDATE) for the whole
        transaction. The update and the audit insert commit together or not
        at all.

        Raises:
            StudentServiceError: STUDENT_NOT_FOUND or PARENT_CONTACT_UNCHANGED
        """
        new_contact = str(parent_contact or "").strip()

        try:
            result = await db.execute(
                select(Student)
                .where(Student.id == student_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            student = result.scalar_one_or_none()
            if not student:
                raise StudentServiceError(StudentErrorKind.STUDENT_NOT_FOUND)

            previous_contact = student.parent_contact
            if previous_contact == new_contact:
                raise StudentServiceError(StudentErrorKind.PARENT_CONTACT_UNCHANGED)

            student.parent_contact = new_contact
            await db.flush()

            db.add(ParentContactChange(
                student_id=student.id,
                previous_contact=previous_contact,
                new_contact=new_contact,
                changed_by_user_id=changed_by_user_id,
            ))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(student)
        logger.log_business_event("parent_contact_changed", student_id=student_id,
                                  changed_by_user_id=changed_by_user_id)
        return student

    async def withdraw_student(
        self,
        db: AsyncSession,
        student_id: int,
        withdrawal_date: Optional[date] = None,
        withdrawal_reason: Optional[str] = None,
    ) -> Student:
        """
        Withdraw an active student. Withdrawal is permanent.

        Raises:
            StudentServiceError: STUDENT_NOT_FOUND or STUDENT_ALREADY_WITHDRAWN
        """
        student = await self._require_student(db, student_id)

        if student.status == StudentStatus.WITHDRAWN:
            raise StudentServiceError(StudentErrorKind.STUDENT_ALREADY_WITHDRAWN)

        reason = (withdrawal_reason or "").strip()

        student.status = StudentStatus.WITHDRAWN
        student.withdrawal_date = withdrawal_date or date.today()
        student.withdrawal_reason = reason or None
        await db.commit()
        await db.refresh(student)

        logger.log_business_event("student_withdrawn", student_id=student_id)
        return student

    async def update_student_master_data(
        self,
        db: AsyncSession,
        student_id: int,
        payload: Dict[str, Any],
    ) -> Student:
        """
        Partially update admission fields.

        Only MASTER_DATA_FIELDS are considered; unknown keys, None and blank
        values are skipped.

        Raises:
            StudentServiceError: STUDENT_NOT_FOUND, NO_MASTER_DATA_FIELDS or
            ADMISSION_NUMBER_EXISTS
        """
        student = await self._require_student(db, student_id)

        changes: Dict[str, Any] = {}
        for field in MASTER_DATA_FIELDS:
            value = payload.get(field)
            if value is None:
                continue
            normalized = _normalize_master_value(field, value)
            if normalized == "":
                continue
            changes[field] = normalized

        if not changes:
            raise StudentServiceError(StudentErrorKind.NO_MASTER_DATA_FIELDS)

        admission_number = changes.get("admission_number")
        if admission_number and await self._admission_number_taken(db, admission_number, exclude_id=student_id):
            raise StudentServiceError(StudentErrorKind.ADMISSION_NUMBER_EXISTS)

        for field, value in changes.items():
            setattr(student, field, value)
        await db.commit()
        await db.refresh(student)

        logger.log_business_event("student_master_data_updated", student_id=student_id,
                                  fields=sorted(changes))
        return student


student_service = StudentService()
