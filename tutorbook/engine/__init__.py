# tutorbook/engine/__init__.py - Billing & financial state engine (pure functions over frozen records)

from tutorbook.engine.records import (
    Budget,
    Expense,
    ExpenseCategory,
    Guardian,
    Payment,
    RecordStatus,
    Registration,
    Snapshot,
    Student,
    StudentStatus,
)
from tutorbook.engine.dates import MonthKey, days_in_month, month_key, start_of_day
from tutorbook.engine.obligations import generate, payment_id
from tutorbook.engine.reconciler import reconcile
from tutorbook.engine.snapshot import reconcile_and_generate

__all__ = [
    "Budget",
    "Expense",
    "ExpenseCategory",
    "Guardian",
    "Payment",
    "RecordStatus",
    "Registration",
    "Snapshot",
    "Student",
    "StudentStatus",
    "MonthKey",
    "days_in_month",
    "month_key",
    "start_of_day",
    "generate",
    "payment_id",
    "reconcile",
    "reconcile_and_generate",
]
