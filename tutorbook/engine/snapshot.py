# tutorbook/engine/snapshot.py - The single pass the host runs before every read and after every command
from tutorbook.engine.dates import DateLike
from tutorbook.engine.obligations import generate
from tutorbook.engine.reconciler import reconcile
from tutorbook.engine.records import Snapshot


def reconcile_and_generate(snapshot: Snapshot, reference_date: DateLike) -> Snapshot:
    """
    Derive the next snapshot: add missing obligations for the reference
    month, then move past-due pending payments and expenses to overdue.

    Returns ``snapshot`` itself when nothing changes, so callers can compare
    with ``==`` (or ``is``) before writing anything back.
    """
    new_payments = generate(snapshot.registrations, snapshot.payments, reference_date)
    payments = tuple(reconcile([*snapshot.payments, *new_payments], reference_date))
    expenses = tuple(reconcile(snapshot.expenses, reference_date))

    if payments == snapshot.payments and expenses == snapshot.expenses:
        return snapshot

    return snapshot.model_copy(update={"payments": payments, "expenses": expenses})


__all__ = ["reconcile_and_generate"]
