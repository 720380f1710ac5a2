"""Monthly tuition obligations.

One payment exists per active student per calendar month. Its id is derived
from the student id and the obligation month, and that id is the only thing
that keeps a second obligation for the same month from being created.
"""
import logging
from typing import Iterable, List, Union

from tutorbook.engine.dates import DateLike, clamp_due_date, is_before, month_key
from tutorbook.engine.records import Payment, RecordStatus, Registration, Student

logger = logging.getLogger(__name__)


def payment_id(student_id: str, year: int, month: int) -> str:
    """Deterministic id of a student's obligation for ``year``/``month`` (1-based month)."""
    return f"{student_id}-{year:04d}-{month:02d}"


def build_obligation(student: Student, reference_date: DateLike) -> Payment:
    """Synthesize the obligation for the reference month, status judged at ``reference_date``."""
    year, month = month_key(reference_date)
    due_date = clamp_due_date(year, month, student.payment_due_day)

    # A freshly generated obligation never carries a payment date
    status = RecordStatus.OVERDUE if is_before(due_date, reference_date) else RecordStatus.PENDING

    return Payment(
        id=payment_id(student.id, year, month),
        student_id=student.id,
        student_name=student.full_name,
        amount=student.monthly_fee,
        due_date=due_date,
        status=status,
    )


def generate(
    students: Iterable[Union[Student, Registration]],
    existing_payments: Iterable[Payment],
    reference_date: DateLike,
) -> List[Payment]:
    """
    Payments that should be added for the month of ``reference_date``.

    Existing payments are never modified or removed. Calling this again with
    its own output included in ``existing_payments`` returns an empty list.

    Args:
        students: Students or registrations; inactive ones are skipped
        existing_payments: Every payment already stored
        reference_date: The "today" the obligation month and status derive from

    Returns:
        New Payment records, in roster order
    """
    year, month = month_key(reference_date)
    known_ids = {p.id for p in existing_payments}
    new_payments: List[Payment] = []

    for entry in students:
        student = entry.student if isinstance(entry, Registration) else entry
        if not student.is_active:
            continue

        obligation_id = payment_id(student.id, year, month)
        if obligation_id in known_ids:
            continue

        payment = build_obligation(student, reference_date)
        known_ids.add(obligation_id)
        new_payments.append(payment)

    if new_payments:
        logger.debug(f"Generated {len(new_payments)} obligation(s) for {year:04d}-{month:02d}")

    return new_payments


__all__ = ["payment_id", "build_obligation", "generate"]
