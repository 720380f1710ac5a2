# tutorbook/api/routers/expenses.py
from fastapi import APIRouter, Depends, Query, Response, status
from typing import List, Optional
from datetime import date
import logging

from tutorbook.api.deps.errors import http_error
from tutorbook.api.deps.service import get_billing_service
from tutorbook.core.exceptions import TutorbookError
from tutorbook.engine.aggregator import filter_expenses
from tutorbook.engine.records import Expense, RecordStatus
from tutorbook.schemas.expense import ExpenseCreate, ExpenseUpdate, MarkPaid
from tutorbook.services.billing_service import BillingService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=List[Expense])
async def list_expenses(
    expense_status: Optional[RecordStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100, description="Case-insensitive match on description"),
    start: Optional[date] = Query(None, description="Earliest due date, inclusive"),
    end: Optional[date] = Query(None, description="Latest due date, inclusive"),
    service: BillingService = Depends(get_billing_service),
):
    expenses = filter_expenses(service.refresh().expenses, expense_status, search, start, end)
    return sorted(expenses, key=lambda e: e.due_date, reverse=True)


@router.post("/", response_model=Expense, status_code=status.HTTP_201_CREATED)
async def create_expense(
    data: ExpenseCreate,
    service: BillingService = Depends(get_billing_service),
):
    """Record a bill; it starts pending and turns overdue once its due date has passed"""
    return service.create_expense(data.model_dump())


@router.put("/{expense_id}", response_model=Expense)
async def update_expense(
    expense_id: str,
    data: ExpenseUpdate,
    service: BillingService = Depends(get_billing_service),
):
    try:
        return service.update_expense(expense_id, data.model_dump(exclude_unset=True))
    except TutorbookError as e:
        raise http_error(e)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: str,
    service: BillingService = Depends(get_billing_service),
):
    try:
        service.delete_expense(expense_id)
    except TutorbookError as e:
        raise http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{expense_id}/pay", response_model=Expense)
async def mark_expense_paid(
    expense_id: str,
    data: Optional[MarkPaid] = None,
    service: BillingService = Depends(get_billing_service),
):
    try:
        return service.mark_expense_paid(expense_id, data.payment_date if data else None)
    except TutorbookError as e:
        raise http_error(e)
