# tutorbook/models/student.py - Students and the guardian registered with each of them
from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import String, Integer, Numeric, Date, DateTime, Text, JSON, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from tutorbook.models.base import Base


class Student(Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(128), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date)
    school_grade: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    subjects_of_interest: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    learning_difficulties: Mapped[str] = mapped_column(Text, nullable=False, default="")
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_due_day: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    photo_url: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")  # active|inactive
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status_changed_at: Mapped[datetime | None] = mapped_column(DateTime)

    guardian: Mapped["Guardian"] = relationship(
        "Guardian",
        back_populates="student",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("status IN ('active','inactive')", name="ck_student_status"),
        CheckConstraint("monthly_fee > 0", name="ck_student_fee_positive"),
        CheckConstraint("payment_due_day BETWEEN 1 AND 31", name="ck_student_due_day"),
        Index("ix_students_status", "status"),
    )


class Guardian(Base):
    __tablename__ = "guardians"

    student_id: Mapped[str] = mapped_column(String(64), ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(128), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    address: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    document_id: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    student: Mapped["Student"] = relationship("Student", back_populates="guardian")

    # Declared last: the column name shadows sqlalchemy.orm.relationship in this class body
    relationship: Mapped[str] = mapped_column(String(32), nullable=False, default="")  # mother, father, etc.
