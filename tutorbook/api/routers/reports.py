# tutorbook/api/routers/reports.py - Dashboard views over the current snapshot
from fastapi import APIRouter, Depends, Query
from typing import Optional
from datetime import date
import logging

from tutorbook.api.routers.payments import MONTH_PATTERN
from tutorbook.api.deps.service import get_billing_service
from tutorbook.core.config import settings
from tutorbook.engine.dates import MonthKey, month_key
from tutorbook.engine.records import RecordStatus
from tutorbook.schemas.report import BudgetReport, FinancialSummary, PayablesReport, RevenueReport
from tutorbook.services import report_service
from tutorbook.services.billing_service import BillingService

logger = logging.getLogger(__name__)
router = APIRouter()


def _month(service: BillingService, month: Optional[str]) -> MonthKey:
    return MonthKey.parse(month) if month else month_key(service.today())


@router.get("/summary", response_model=FinancialSummary)
async def financial_summary(
    on: Optional[date] = Query(None, description="Reference date, defaults to today"),
    service: BillingService = Depends(get_billing_service),
):
    """Revenue, expenses, profit and receivables for the reference month"""
    reference_date = on or service.today()
    snapshot = service.refresh()
    return report_service.build_financial_summary(snapshot, reference_date, settings.UPCOMING_WINDOW_DAYS)


@router.get("/revenue", response_model=RevenueReport)
async def revenue_report(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    payment_status: Optional[RecordStatus] = Query(None, alias="status"),
    service: BillingService = Depends(get_billing_service),
):
    snapshot = service.refresh()
    return report_service.build_revenue_report(snapshot, _month(service, month), payment_status)


@router.get("/budget", response_model=BudgetReport)
async def budget_report(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    service: BillingService = Depends(get_billing_service),
):
    """Budget usage per category, highest usage first, plus the spend distribution"""
    snapshot = service.refresh()
    return report_service.build_budget_report(snapshot, _month(service, month))


@router.get("/payables", response_model=PayablesReport)
async def accounts_payable(service: BillingService = Depends(get_billing_service)):
    snapshot = service.refresh()
    return report_service.build_accounts_payable(snapshot, service.today(), settings.UPCOMING_WINDOW_DAYS)
