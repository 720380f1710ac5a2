# tutorbook/api/routers/students.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
import logging

from tutorbook.api.deps.errors import http_error
from tutorbook.api.deps.service import get_billing_service
from tutorbook.core.exceptions import TutorbookError
from tutorbook.engine.aggregator import latest_payment
from tutorbook.engine.records import Registration, Student, StudentStatus
from tutorbook.schemas.student import (
    RegistrationCreate,
    RegistrationImport,
    RegistrationOut,
    StatusChange,
)
from tutorbook.services.billing_service import BillingService

logger = logging.getLogger(__name__)
router = APIRouter()


def _registration_out(registration: Registration, payments) -> RegistrationOut:
    return RegistrationOut(
        student=registration.student,
        guardian=registration.guardian,
        last_payment=latest_payment(payments, registration.student.id),
    )


@router.get("/", response_model=List[RegistrationOut])
async def list_students(
    student_status: Optional[StudentStatus] = Query(None, alias="status"),
    service: BillingService = Depends(get_billing_service),
):
    """List registrations with each student's most recent obligation"""
    snapshot = service.refresh()

    registrations = snapshot.registrations
    if student_status is not None:
        registrations = [r for r in registrations if r.student.status == student_status]

    registrations = sorted(registrations, key=lambda r: r.student.full_name.lower())
    return [_registration_out(r, snapshot.payments) for r in registrations]


@router.post("/", response_model=RegistrationOut, status_code=status.HTTP_201_CREATED)
async def register_student(
    data: RegistrationCreate,
    service: BillingService = Depends(get_billing_service),
):
    """Register a student; this month's obligation is generated right away"""
    registration = service.register_student(
        data.student.model_dump(),
        data.guardian.model_dump(),
    )
    snapshot = service.repository.load_snapshot()
    return _registration_out(registration, snapshot.payments)


@router.post("/import", response_model=List[RegistrationOut], status_code=status.HTTP_201_CREATED)
async def import_students(
    data: RegistrationImport,
    service: BillingService = Depends(get_billing_service),
):
    """Bulk register rows already parsed from a spreadsheet"""
    imported = service.import_registrations(
        (row.student.model_dump(), row.guardian.model_dump()) for row in data.registrations
    )
    snapshot = service.repository.load_snapshot()
    return [_registration_out(r, snapshot.payments) for r in imported]


@router.put("/{student_id}", response_model=RegistrationOut)
async def update_student(
    student_id: str,
    data: RegistrationCreate,
    service: BillingService = Depends(get_billing_service),
):
    """Edit a student and their guardian; obligations already generated are not re-priced"""
    try:
        registration = service.update_registration(
            student_id,
            data.student.model_dump(),
            data.guardian.model_dump(),
        )
    except TutorbookError as e:
        raise http_error(e)
    snapshot = service.repository.load_snapshot()
    return _registration_out(registration, snapshot.payments)


@router.put("/{student_id}/status", response_model=Student)
async def change_student_status(
    student_id: str,
    data: StatusChange,
    service: BillingService = Depends(get_billing_service),
):
    """Activate or archive a student; archived students stop receiving new obligations"""
    try:
        return service.change_student_status(student_id, data.status)
    except TutorbookError as e:
        raise http_error(e)
