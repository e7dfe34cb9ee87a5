from typing import Optional

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from soho_transport.api.responses import envelope
from soho_transport.core.database import get_db
from soho_transport.modules.auth.dependencies import require_school_admin
from soho_transport.schemas.auth import TokenClaims
from soho_transport.schemas.student import (
    ParentContactUpdate,
    StudentAdmissionCreate,
    StudentMasterDataUpdate,
    StudentOut,
    StudentWithdrawal,
)
from soho_transport.services.student_service import student_service

router = APIRouter(dependencies=[Depends(require_school_admin)])


def _student_data(student) -> dict:
    return {"student": StudentOut.model_validate(student).to_json()}


@router.get("")
async def get_students_dashboard_data(db: AsyncSession = Depends(get_db)):
    """Students, admissions, withdrawals, recent contact changes and counts"""
    dashboard = await student_service.list_students_dashboard_data(db)
    return envelope("Student data retrieved successfully.", dashboard.to_json())


@router.post("/admissions", status_code=status.HTTP_201_CREATED)
async def admit_student(
    payload: StudentAdmissionCreate,
    db: AsyncSession = Depends(get_db),
):
    student = await student_service.create_student_admission(db, payload)
    return envelope("Student admission created successfully.", _student_data(student))


@router.patch("/{studentId}/parent-contact")
async def change_parent_contact(
    payload: ParentContactUpdate,
    student_id: int = Path(..., alias="studentId", gt=0),
    claims: TokenClaims = Depends(require_school_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change the parent contact; the change is recorded against the acting admin"""
    student = await student_service.update_student_parent_contact(
        db,
        student_id=student_id,
        parent_contact=payload.parent_contact,
        changed_by_user_id=claims.user_id,
    )
    return envelope("Parent contact updated successfully.", _student_data(student))


@router.patch("/{studentId}/withdrawal")
async def withdraw_student(
    payload: Optional[StudentWithdrawal] = None,
    student_id: int = Path(..., alias="studentId", gt=0),
    db: AsyncSession = Depends(get_db),
):
    payload = payload or StudentWithdrawal()
    student = await student_service.withdraw_student(
        db,
        student_id=student_id,
        withdrawal_date=payload.withdrawal_date,
        withdrawal_reason=payload.withdrawal_reason,
    )
    return envelope("Student withdrawal recorded successfully.", _student_data(student))


@router.patch("/{studentId}/master-data")
async def update_master_data(
    payload: StudentMasterDataUpdate,
    student_id: int = Path(..., alias="studentId", gt=0),
    db: AsyncSession = Depends(get_db),
):
    student = await student_service.update_student_master_data(db, student_id, payload.changes())
    return envelope("Student master data updated successfully.", _student_data(student))
