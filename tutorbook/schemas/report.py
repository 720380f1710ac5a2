# tutorbook/schemas/report.py - Dashboard responses assembled from aggregator queries
from typing import Dict, List
from decimal import Decimal

from tutorbook.engine.aggregator import BudgetVariance, CategoryShare, StatusCounts, Tally
from tutorbook.engine.records import Payment
from tutorbook.schemas.common import CamelModel


class FinancialSummary(CamelModel):
    month: str
    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    pending_revenue: Decimal
    projected_revenue: Decimal
    upcoming_payments: Tally
    overdue_expenses: Tally
    active_students: int
    new_students: int
    archived_students: int
    subject_distribution: Dict[str, int] = {}


class RevenueReport(CamelModel):
    month: str
    stats: StatusCounts
    payments: List[Payment]


class BudgetReport(CamelModel):
    month: str
    variances: List[BudgetVariance]
    distribution: List[CategoryShare]
    total_spend: Decimal


class PayablesReport(CamelModel):
    overdue: Tally
    due_soon: Tally
    window_days: int
