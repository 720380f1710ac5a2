"""Time-driven status pass: pending records whose due date has passed become overdue."""
from typing import List, Sequence, TypeVar, Union

from tutorbook.engine.dates import DateLike, is_before
from tutorbook.engine.records import Expense, Payment, RecordStatus

R = TypeVar("R", Payment, Expense)


def is_past_due(record: Union[Payment, Expense], reference_date: DateLike) -> bool:
    return record.status == RecordStatus.PENDING and is_before(record.due_date, reference_date)


def reconcile(records: Sequence[R], reference_date: DateLike) -> List[R]:
    """
    Advance pending records past their due date to overdue.

    Paid and overdue records, and pending records not yet due, are returned
    as the very same objects. Applying the pass twice with the same
    reference date gives the same result as applying it once.
    """
    return [
        record.model_copy(update={"status": RecordStatus.OVERDUE})
        if is_past_due(record, reference_date)
        else record
        for record in records
    ]


def has_changes(before, after) -> bool:
    """Structural comparison used to decide whether a write is needed"""
    if isinstance(before, Sequence) and isinstance(after, Sequence):
        return tuple(before) != tuple(after)
    return before != after


__all__ = ["is_past_due", "reconcile", "has_changes"]
