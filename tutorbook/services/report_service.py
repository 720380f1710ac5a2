# tutorbook/services/report_service.py - Dashboard reports assembled from aggregator queries
from typing import Optional

from tutorbook.engine import aggregator
from tutorbook.engine.dates import DateLike, MonthKey, month_key
from tutorbook.engine.records import RecordStatus, Snapshot
from tutorbook.schemas.report import BudgetReport, FinancialSummary, PayablesReport, RevenueReport


def build_financial_summary(snapshot: Snapshot, reference_date: DateLike, window_days: int = 7) -> FinancialSummary:
    """
    Headline numbers for the month containing ``reference_date``.

    Revenue and expenses count only records actually paid during the month;
    projected revenue is the fee roll of currently active students.
    """
    month = month_key(reference_date)
    revenue = aggregator.total_revenue(snapshot.payments, month)
    spent = aggregator.total_expenses_paid(snapshot.expenses, month)

    return FinancialSummary(
        month=str(month),
        total_revenue=revenue,
        total_expenses=spent,
        net_profit=revenue - spent,
        pending_revenue=aggregator.pending_revenue(snapshot.payments, month),
        projected_revenue=aggregator.projected_revenue(snapshot.registrations),
        upcoming_payments=aggregator.upcoming_payments(snapshot.payments, reference_date, window_days),
        overdue_expenses=aggregator.overdue_expenses(snapshot.expenses),
        active_students=sum(1 for s in snapshot.students if s.is_active),
        new_students=aggregator.new_students_in_month(snapshot.registrations, month),
        archived_students=aggregator.archived_students_in_month(snapshot.registrations, month),
        subject_distribution=aggregator.subject_distribution(snapshot.registrations),
    )


def build_revenue_report(
    snapshot: Snapshot,
    month: MonthKey,
    status: Optional[RecordStatus] = None,
) -> RevenueReport:
    """Obligations due in ``month`` with their status breakdown"""
    due = [p for p in snapshot.payments if month.contains(p.due_date)]
    if status is not None:
        due = [p for p in due if p.status == status]

    return RevenueReport(
        month=str(month),
        stats=aggregator.payment_status_counts(snapshot.payments, month),
        payments=sorted(due, key=lambda p: (p.due_date, p.student_name)),
    )


def build_budget_report(snapshot: Snapshot, month: MonthKey) -> BudgetReport:
    this_month = aggregator.expenses_in_month(snapshot.expenses, month)
    return BudgetReport(
        month=str(month),
        variances=aggregator.budget_report(snapshot.budget, this_month),
        distribution=aggregator.expense_distribution(this_month),
        total_spend=sum((e.amount for e in this_month), aggregator.ZERO),
    )


def build_accounts_payable(snapshot: Snapshot, reference_date: DateLike, window_days: int = 7) -> PayablesReport:
    return PayablesReport(
        overdue=aggregator.overdue_expenses(snapshot.expenses),
        due_soon=aggregator.expenses_due_soon(snapshot.expenses, reference_date, window_days),
        window_days=window_days,
    )


__all__ = [
    "build_financial_summary",
    "build_revenue_report",
    "build_budget_report",
    "build_accounts_payable",
]
