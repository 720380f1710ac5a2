# tutorbook/schemas/expense.py
from pydantic import Field, field_validator
from typing import Optional
from datetime import date
from decimal import Decimal

from tutorbook.engine.records import ExpenseCategory
from tutorbook.schemas.common import CamelModel


class ExpenseCreate(CamelModel):
    description: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category: ExpenseCategory = ExpenseCategory.OTHER
    due_date: date

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Ensure description is not just whitespace"""
        if not v.strip():
            raise ValueError('Description cannot be empty or whitespace')
        return v.strip()


class ExpenseUpdate(CamelModel):
    """Editable fields; status and payment date only change through mark-paid"""
    description: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    category: Optional[ExpenseCategory] = None
    due_date: Optional[date] = None

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError('Description cannot be empty or whitespace')
        return v.strip() if v else None


class MarkPaid(CamelModel):
    payment_date: Optional[date] = None  # defaults to today
