# tutorbook/engine/records.py - Immutable domain records the billing engine works on
from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class StudentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class RecordStatus(str, enum.Enum):
    """Status shared by payments and expenses"""
    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"


class ExpenseCategory(str, enum.Enum):
    SALARIES = "Salaries"
    MARKETING = "Marketing"
    SUPPLIES = "Supplies"
    RENT = "Rent"
    UTILITIES = "Utilities"
    SOFTWARE_SUBSCRIPTIONS = "Software Subscriptions"
    PROFESSIONAL_DEVELOPMENT = "Professional Development"
    TRAVEL = "Travel"
    TAXES = "Taxes"
    THIRD_PARTY_SERVICES = "Third-Party Services"
    OTHER = "Other"


class Record(BaseModel):
    """Frozen, camelCase-serialized base for every stored record"""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Guardian(Record):
    full_name: str
    relationship: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    document_id: str = ""


class Student(Record):
    id: str
    full_name: str
    birth_date: Optional[date] = None
    school_grade: str = ""
    subjects_of_interest: tuple[str, ...] = ()
    learning_difficulties: str = ""
    monthly_fee: Decimal
    payment_due_day: int = 10
    photo_url: Optional[str] = None
    status: StudentStatus = StudentStatus.ACTIVE
    created_at: datetime
    status_changed_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE


class Registration(Record):
    student: Student
    guardian: Guardian


class Payment(Record):
    id: str
    student_id: str
    student_name: str
    amount: Decimal
    due_date: date
    payment_date: Optional[date] = None
    status: RecordStatus = RecordStatus.PENDING


class Expense(Record):
    id: str
    description: str
    amount: Decimal
    category: ExpenseCategory = ExpenseCategory.OTHER
    due_date: date
    payment_date: Optional[date] = None
    status: RecordStatus = RecordStatus.PENDING


class Budget(Record):
    """
    Monthly ceiling per expense category; every category is always present.

    Ceilings are held as (category, amount) pairs in category order so a
    budget shared by several snapshots cannot be changed in place.
    """
    ceilings: tuple[tuple[ExpenseCategory, Decimal], ...] = ()

    @model_validator(mode="before")
    @classmethod
    def fill_missing_categories(cls, data):
        if not isinstance(data, dict):
            return data
        given = data.get("ceilings") or {}
        pairs = given.items() if isinstance(given, Mapping) else given
        amounts = {ExpenseCategory(key): value for key, value in pairs}
        ceilings = tuple(
            (category, Decimal("0") if amounts.get(category) is None else amounts[category])
            for category in ExpenseCategory
        )
        return {**data, "ceilings": ceilings}

    @classmethod
    def from_mapping(cls, mapping: Mapping[ExpenseCategory | str, Decimal | int | float | str | None]) -> "Budget":
        return cls(ceilings={key: Decimal(str(value)) if value is not None else None for key, value in mapping.items()})

    def ceiling(self, category: ExpenseCategory) -> Decimal:
        return dict(self.ceilings)[category]

    def to_mapping(self) -> dict[str, Decimal]:
        """A fresh Category -> amount map; changing it leaves the budget untouched"""
        return {category.value: amount for category, amount in self.ceilings}


class Snapshot(Record):
    """Everything the engine needs, as one immutable value"""
    registrations: tuple[Registration, ...] = ()
    payments: tuple[Payment, ...] = ()
    expenses: tuple[Expense, ...] = ()
    budget: Budget = Field(default_factory=Budget)

    @property
    def students(self) -> tuple[Student, ...]:
        return tuple(r.student for r in self.registrations)


__all__ = [
    "StudentStatus",
    "RecordStatus",
    "ExpenseCategory",
    "Record",
    "Guardian",
    "Student",
    "Registration",
    "Payment",
    "Expense",
    "Budget",
    "Snapshot",
]
