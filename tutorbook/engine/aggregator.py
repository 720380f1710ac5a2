"""
Financial queries over a snapshot.

Every function here is pure: same inputs, same answer, nothing mutated.
Empty inputs give zero totals, and ratios with a zero denominator are zero.
Records are summed as they are, so a duplicated obligation is counted twice
rather than rejected.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Sequence

from tutorbook.engine.dates import DateLike, MonthKey, in_window
from tutorbook.engine.records import (
    Budget,
    Expense,
    ExpenseCategory,
    Payment,
    Record,
    RecordStatus,
    Registration,
    Student,
    StudentStatus,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class Tally(Record):
    count: int = 0
    total: Decimal = ZERO


class StatusCounts(Record):
    paid: int = 0
    pending: int = 0
    overdue: int = 0
    total: int = 0


class BudgetVariance(Record):
    category: ExpenseCategory
    budgeted: Decimal
    actual: Decimal
    diff: Decimal
    percent: Decimal


class CategoryShare(Record):
    category: ExpenseCategory
    amount: Decimal
    percentage: Decimal


def _sum(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def _ratio_percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return ZERO
    return part / whole * HUNDRED


def _as_budget(budget: Budget | Mapping) -> Budget:
    return budget if isinstance(budget, Budget) else Budget.from_mapping(budget)


def _tally(records: Sequence) -> Tally:
    return Tally(count=len(records), total=_sum(r.amount for r in records))


def _paid_in(records: Iterable, month: MonthKey) -> List:
    return [r for r in records if r.status == RecordStatus.PAID and month.contains(r.payment_date)]


# --- Revenue and profit ---

def total_revenue(payments: Iterable[Payment], month: MonthKey) -> Decimal:
    """Sum of payments marked paid with a payment date inside ``month``"""
    return _sum(p.amount for p in _paid_in(payments, month))


def total_expenses_paid(expenses: Iterable[Expense], month: MonthKey) -> Decimal:
    """Sum of expenses marked paid with a payment date inside ``month``"""
    return _sum(e.amount for e in _paid_in(expenses, month))


def net_profit(payments: Iterable[Payment], expenses: Iterable[Expense], month: MonthKey) -> Decimal:
    return total_revenue(payments, month) - total_expenses_paid(expenses, month)


def projected_revenue(students: Iterable[Student | Registration]) -> Decimal:
    """Monthly fees of every currently active student; not tied to a month"""
    roster = [s.student if isinstance(s, Registration) else s for s in students]
    return _sum(s.monthly_fee for s in roster if s.is_active)


def pending_revenue(payments: Iterable[Payment], month: MonthKey) -> Decimal:
    """Amount still to be collected for obligations due in ``month``"""
    return _sum(p.amount for p in payments if p.status != RecordStatus.PAID and month.contains(p.due_date))


def payment_status_counts(payments: Iterable[Payment], month: MonthKey) -> StatusCounts:
    due = [p for p in payments if month.contains(p.due_date)]
    return StatusCounts(
        paid=sum(1 for p in due if p.status == RecordStatus.PAID),
        pending=sum(1 for p in due if p.status == RecordStatus.PENDING),
        overdue=sum(1 for p in due if p.status == RecordStatus.OVERDUE),
        total=len(due),
    )


# --- Receivables and payables ---

def upcoming_payments(payments: Iterable[Payment], reference_date: DateLike, window_days: int = 7) -> Tally:
    """Unpaid obligations due between today and ``window_days`` from today, inclusive"""
    upcoming = [
        p for p in payments
        if p.status != RecordStatus.PAID and in_window(p.due_date, reference_date, window_days)
    ]
    return _tally(upcoming)


def overdue_expenses(expenses: Iterable[Expense]) -> Tally:
    return _tally([e for e in expenses if e.status == RecordStatus.OVERDUE])


def expenses_due_soon(expenses: Iterable[Expense], reference_date: DateLike, window_days: int = 7) -> Tally:
    """Pending bills falling due inside the look-ahead window"""
    due_soon = [
        e for e in expenses
        if e.status == RecordStatus.PENDING and in_window(e.due_date, reference_date, window_days)
    ]
    return _tally(due_soon)


def expenses_in_month(expenses: Iterable[Expense], month: MonthKey) -> List[Expense]:
    """Expenses whose due date falls in ``month``, whatever their status"""
    return [e for e in expenses if month.contains(e.due_date)]


def filter_expenses(
    expenses: Iterable[Expense],
    status: Optional[RecordStatus] = None,
    search: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Expense]:
    needle = search.lower() if search else None
    return [
        e for e in expenses
        if (status is None or e.status == status)
        and (needle is None or needle in e.description.lower())
        and (start is None or e.due_date >= start)
        and (end is None or e.due_date <= end)
    ]


# --- Budget ---

def budget_variance(budget: Budget | Mapping, expenses_this_month: Iterable[Expense], category: ExpenseCategory) -> BudgetVariance:
    """
    Compare a category's ceiling with what was spent against it.

    ``percent`` is actual / budgeted * 100, or zero when no ceiling is set,
    so it is always finite and never negative.
    """
    budgeted = _as_budget(budget).ceiling(category)
    actual = _sum(e.amount for e in expenses_this_month if e.category == category)
    return BudgetVariance(
        category=category,
        budgeted=budgeted,
        actual=actual,
        diff=budgeted - actual,
        percent=_ratio_percent(actual, budgeted),
    )


def budget_report(budget: Budget | Mapping, expenses_this_month: Iterable[Expense]) -> List[BudgetVariance]:
    """Variance for every category, highest usage first"""
    budget = _as_budget(budget)
    expenses = list(expenses_this_month)
    rows = [budget_variance(budget, expenses, category) for category in ExpenseCategory]
    return sorted(rows, key=lambda row: row.percent, reverse=True)


def expense_distribution(expenses_this_month: Iterable[Expense]) -> List[CategoryShare]:
    """Spend per category with its share of the month's total; empty categories left out"""
    expenses = list(expenses_this_month)
    total = _sum(e.amount for e in expenses)

    shares = []
    for category in ExpenseCategory:
        amount = _sum(e.amount for e in expenses if e.category == category)
        if amount > 0:
            shares.append(CategoryShare(
                category=category,
                amount=amount,
                percentage=_ratio_percent(amount, total),
            ))

    return sorted(shares, key=lambda share: share.amount, reverse=True)


# --- Roster ---

def latest_payment(payments: Iterable[Payment], student_id: str) -> Optional[Payment]:
    """The student's most recent obligation by due date"""
    own = [p for p in payments if p.student_id == student_id]
    return max(own, key=lambda p: p.due_date, default=None)


def new_students_in_month(registrations: Iterable[Registration], month: MonthKey) -> int:
    return sum(1 for r in registrations if month.contains(r.student.created_at))


def archived_students_in_month(registrations: Iterable[Registration], month: MonthKey) -> int:
    return sum(
        1 for r in registrations
        if r.student.status == StudentStatus.INACTIVE and month.contains(r.student.status_changed_at)
    )


def subject_distribution(registrations: Iterable[Registration]) -> dict[str, int]:
    """Active students per subject of interest"""
    counts: dict[str, int] = {}
    for r in registrations:
        if not r.student.is_active:
            continue
        for subject in r.student.subjects_of_interest:
            counts[subject] = counts.get(subject, 0) + 1
    return counts


__all__ = [
    "Tally",
    "StatusCounts",
    "BudgetVariance",
    "CategoryShare",
    "total_revenue",
    "total_expenses_paid",
    "net_profit",
    "projected_revenue",
    "pending_revenue",
    "payment_status_counts",
    "upcoming_payments",
    "overdue_expenses",
    "expenses_due_soon",
    "expenses_in_month",
    "filter_expenses",
    "budget_variance",
    "budget_report",
    "expense_distribution",
    "latest_payment",
    "new_students_in_month",
    "archived_students_in_month",
    "subject_distribution",
]
