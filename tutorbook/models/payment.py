# tutorbook/models/payment.py - Monthly tuition obligations
from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import String, Numeric, Date, DateTime, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from tutorbook.models.base import Base


class Payment(Base):
    __tablename__ = "payments"

    # "<student id>-<YYYY>-<MM>", one row per student per month
    id: Mapped[str] = mapped_column(String(80), primary_key=True)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # pending|overdue|paid

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('pending','overdue','paid')", name="ck_payment_status"),
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        Index("ix_payments_due_date_status", "due_date", "status"),
    )
