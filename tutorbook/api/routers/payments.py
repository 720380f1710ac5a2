# tutorbook/api/routers/payments.py
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from tutorbook.api.deps.errors import http_error
from tutorbook.api.deps.service import get_billing_service
from tutorbook.core.exceptions import TutorbookError
from tutorbook.engine.dates import MonthKey
from tutorbook.engine.records import Payment, RecordStatus
from tutorbook.schemas.expense import MarkPaid
from tutorbook.services.billing_service import BillingService

logger = logging.getLogger(__name__)
router = APIRouter()

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


@router.get("/", response_model=List[Payment])
async def list_payments(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="Due month as YYYY-MM"),
    payment_status: Optional[RecordStatus] = Query(None, alias="status"),
    student_id: Optional[str] = Query(None, alias="studentId"),
    service: BillingService = Depends(get_billing_service),
):
    """List monthly obligations, newest due date first"""
    payments = service.refresh().payments

    if month:
        key = MonthKey.parse(month)
        payments = [p for p in payments if key.contains(p.due_date)]
    if payment_status is not None:
        payments = [p for p in payments if p.status == payment_status]
    if student_id:
        payments = [p for p in payments if p.student_id == student_id]

    return sorted(payments, key=lambda p: (p.due_date, p.student_name), reverse=True)


@router.put("/{payment_id}/pay", response_model=Payment)
async def mark_payment_paid(
    payment_id: str,
    data: Optional[MarkPaid] = None,
    service: BillingService = Depends(get_billing_service),
):
    """Settle an obligation in full; the payment date defaults to today"""
    try:
        return service.mark_payment_paid(payment_id, data.payment_date if data else None)
    except TutorbookError as e:
        raise http_error(e)
