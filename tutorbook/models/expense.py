# tutorbook/models/expense.py - Accounts payable and monthly budget ceilings
from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import String, Numeric, Date, DateTime, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from tutorbook.models.base import Base
from tutorbook.engine.records import ExpenseCategory

_CATEGORY_VALUES = ",".join(f"'{c.value}'" for c in ExpenseCategory)


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default=ExpenseCategory.OTHER.value)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # pending|overdue|paid

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('pending','overdue','paid')", name="ck_expense_status"),
        CheckConstraint(f"category IN ({_CATEGORY_VALUES})", name="ck_expense_category"),
        CheckConstraint("amount > 0", name="ck_expense_amount_positive"),
        Index("ix_expenses_due_date_status", "due_date", "status"),
    )


class BudgetCeiling(Base):
    __tablename__ = "budget_ceilings"

    category: Mapped[str] = mapped_column(String(32), primary_key=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal('0.00'))

    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_budget_amount_non_negative"),
    )
