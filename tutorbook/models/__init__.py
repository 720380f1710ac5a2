# tutorbook/models/__init__.py - Import all models so SQLAlchemy can discover them

from tutorbook.models.base import Base
from tutorbook.models.student import Student, Guardian
from tutorbook.models.payment import Payment
from tutorbook.models.expense import Expense, BudgetCeiling

__all__ = [
    "Base",
    "Student",
    "Guardian",
    "Payment",
    "Expense",
    "BudgetCeiling",
]
