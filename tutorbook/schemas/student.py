# tutorbook/schemas/student.py
from pydantic import Field, field_validator
from typing import List, Optional
from datetime import date
from decimal import Decimal

from tutorbook.engine.records import Guardian, Payment, Student, StudentStatus
from tutorbook.schemas.common import CamelModel


class GuardianIn(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=128)
    relationship: str = Field("", max_length=32)
    phone: str = Field("", max_length=32)
    email: str = Field("", max_length=128)
    address: str = Field("", max_length=255)
    document_id: str = Field("", max_length=32)

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Guardian name cannot be empty or whitespace')
        return v.strip()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class StudentCreate(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=128)
    birth_date: Optional[date] = None
    school_grade: str = Field("", max_length=64)
    subjects_of_interest: List[str] = []
    learning_difficulties: str = ""
    monthly_fee: Decimal = Field(..., gt=0, decimal_places=2)
    payment_due_day: Optional[int] = Field(None, ge=1, le=31)  # None: use the configured default
    photo_url: Optional[str] = Field(None, max_length=255)

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Student name cannot be empty or whitespace')
        return v.strip()

    @field_validator('subjects_of_interest')
    @classmethod
    def clean_subjects(cls, v: List[str]) -> List[str]:
        return [s.strip() for s in v if s and s.strip()]


class RegistrationCreate(CamelModel):
    student: StudentCreate
    guardian: GuardianIn


class RegistrationImport(CamelModel):
    """Rows already parsed and validated from a spreadsheet"""
    registrations: List[RegistrationCreate] = Field(..., min_length=1)


class StatusChange(CamelModel):
    status: StudentStatus


class RegistrationOut(CamelModel):
    student: Student
    guardian: Guardian
    last_payment: Optional[Payment] = None
