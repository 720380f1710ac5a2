# tutorbook/services/billing_service.py - Commands plus the generate/reconcile pass, with diff-before-write
import logging
import uuid
from datetime import date, datetime
from typing import Callable, Iterable, List, Mapping, Optional

from tutorbook.core.exceptions import RecordAlreadyPaidError, RecordNotFoundError
from tutorbook.engine.dates import DateLike, start_of_day
from tutorbook.engine.reconciler import has_changes
from tutorbook.engine.records import (
    Budget,
    Expense,
    Guardian,
    Payment,
    RecordStatus,
    Registration,
    Snapshot,
    Student,
    StudentStatus,
)
from tutorbook.engine.snapshot import reconcile_and_generate
from tutorbook.services.repository import CollectionKey, SnapshotRepository

logger = logging.getLogger(__name__)

_COLLECTIONS = {
    CollectionKey.REGISTRATIONS: "registrations",
    CollectionKey.PAYMENTS: "payments",
    CollectionKey.EXPENSES: "expenses",
    CollectionKey.BUDGETS: "budget",
}


class BillingService:
    """
    Host for the billing engine.

    Every command persists its own mutation and then runs ``refresh``, which
    adds the month's missing obligations, marks past-due records overdue and
    writes back only the collections that actually changed.
    """

    def __init__(
        self,
        repository: SnapshotRepository,
        clock: Callable[[], datetime] = datetime.now,
        default_due_day: int = 10,
    ):
        self.repository = repository
        self.clock = clock
        self.default_due_day = default_due_day

    # --- Snapshot pass ---

    def refresh(self, reference_date: Optional[DateLike] = None) -> Snapshot:
        """Bring the stored snapshot up to date with ``reference_date`` (default: now)"""
        reference_date = reference_date or self.clock()
        current = self.repository.load_snapshot()
        updated = reconcile_and_generate(current, reference_date)
        self._commit(current, updated)
        return updated

    def _commit(self, before: Snapshot, after: Snapshot) -> List[CollectionKey]:
        """Save each collection that differs; unchanged collections cause no write"""
        written = []
        for key, attr in _COLLECTIONS.items():
            if has_changes(getattr(before, attr), getattr(after, attr)):
                self.repository.save(key, getattr(after, attr))
                written.append(key)

        if written:
            logger.debug(f"Committed collections: {[k.value for k in written]}")
        else:
            logger.debug("Snapshot unchanged, nothing written")
        return written

    def _apply(self, mutate: Callable[[Snapshot], Snapshot]) -> Snapshot:
        current = self.repository.load_snapshot()
        self._commit(current, mutate(current))
        return self.refresh()

    def today(self) -> date:
        return start_of_day(self.clock())

    # --- Students ---

    def register_student(self, student_fields: Mapping, guardian: Guardian | Mapping) -> Registration:
        """Add a validated student/guardian pair as an active student"""
        registration = self._new_registration(student_fields, guardian)
        self._apply(lambda s: s.model_copy(update={"registrations": (registration, *s.registrations)}))
        logger.info(f"Registered student {registration.student.id} ({registration.student.full_name})")
        return registration

    def import_registrations(self, rows: Iterable[tuple[Mapping, Guardian | Mapping]]) -> List[Registration]:
        """Bulk add validated student/guardian pairs, e.g. parsed from a spreadsheet"""
        imported = [self._new_registration(fields, guardian) for fields, guardian in rows]
        self._apply(lambda s: s.model_copy(update={"registrations": (*imported, *s.registrations)}))
        logger.info(f"Imported {len(imported)} registration(s)")
        return imported

    def _new_registration(self, student_fields: Mapping, guardian: Guardian | Mapping) -> Registration:
        fields = dict(student_fields)
        if not fields.get("payment_due_day"):
            fields["payment_due_day"] = self.default_due_day
        student = Student(
            **fields,
            id=uuid.uuid4().hex,
            status=StudentStatus.ACTIVE,
            created_at=self.clock(),
        )
        if not isinstance(guardian, Guardian):
            guardian = Guardian(**guardian)
        return Registration(student=student, guardian=guardian)

    def change_student_status(self, student_id: str, status: StudentStatus) -> Student:
        """Activate or archive a student; the timestamp only moves on a real transition"""
        snapshot = self.repository.load_snapshot()
        registration = self._find_registration(snapshot, student_id)
        student = registration.student

        if student.status != status:
            student = student.model_copy(update={"status": status, "status_changed_at": self.clock()})
            updated = registration.model_copy(update={"student": student})
            registrations = tuple(updated if r.student.id == student_id else r for r in snapshot.registrations)
            self._apply(lambda s: s.model_copy(update={"registrations": registrations}))
            logger.info(f"Student {student_id} is now {status.value}")

        return student

    def update_registration(
        self,
        student_id: str,
        student_fields: Mapping,
        guardian: Guardian | Mapping,
    ) -> Registration:
        """
        Replace a student's details and guardian.

        Id, creation time, status and photo are kept. Obligations already
        generated keep the name and amount they were created with; a new fee
        applies from the next generated month.
        """
        snapshot = self.repository.load_snapshot()
        current = self._find_registration(snapshot, student_id).student

        fields = {k: v for k, v in dict(student_fields).items() if k not in _KEPT_STUDENT_FIELDS}
        if not fields.get("payment_due_day"):
            fields["payment_due_day"] = current.payment_due_day
        student = Student(
            **fields,
            id=current.id,
            created_at=current.created_at,
            status=current.status,
            status_changed_at=current.status_changed_at,
            photo_url=current.photo_url,
        )
        if not isinstance(guardian, Guardian):
            guardian = Guardian(**guardian)
        updated = Registration(student=student, guardian=guardian)

        self._apply(lambda s: s.model_copy(update={
            "registrations": tuple(updated if r.student.id == student_id else r for r in s.registrations),
        }))
        logger.info(f"Updated student {student_id} ({student.full_name})")
        return updated

    def _find_registration(self, snapshot: Snapshot, student_id: str) -> Registration:
        for registration in snapshot.registrations:
            if registration.student.id == student_id:
                return registration
        raise RecordNotFoundError("Student", student_id)

    # --- Payments ---

    def mark_payment_paid(self, payment_id: str, payment_date: Optional[date] = None) -> Payment:
        """Settle an obligation in full; paid is terminal"""
        snapshot = self.repository.load_snapshot()
        payment = _find(snapshot.payments, payment_id, "Payment")
        if payment.status == RecordStatus.PAID:
            raise RecordAlreadyPaidError("Payment", payment_id)

        paid = payment.model_copy(update={
            "status": RecordStatus.PAID,
            "payment_date": payment_date or self.today(),
        })
        self._apply(lambda s: s.model_copy(update={"payments": _replace(s.payments, paid)}))
        logger.info(f"Payment {payment_id} marked paid on {paid.payment_date}")
        return paid

    # --- Expenses ---

    def create_expense(self, fields: Mapping) -> Expense:
        expense = Expense(**fields, id=f"exp-{uuid.uuid4().hex}", status=RecordStatus.PENDING)
        snapshot = self._apply(lambda s: s.model_copy(update={"expenses": (expense, *s.expenses)}))
        logger.info(f"Created expense {expense.id}: {expense.description}")
        # The pass may already have moved it to overdue
        return _find(snapshot.expenses, expense.id, "Expense")

    def update_expense(self, expense_id: str, fields: Mapping) -> Expense:
        """Edit description, amount, category or due date of an unpaid expense"""
        snapshot = self.repository.load_snapshot()
        expense = _find(snapshot.expenses, expense_id, "Expense")
        if expense.status == RecordStatus.PAID:
            raise RecordAlreadyPaidError("Expense", expense_id)

        changes = {k: v for k, v in fields.items() if v is not None and k in _EDITABLE_EXPENSE_FIELDS}
        edited = Expense.model_validate({**expense.model_dump(), **changes})
        snapshot = self._apply(lambda s: s.model_copy(update={"expenses": _replace(s.expenses, edited)}))
        logger.info(f"Updated expense {expense_id}: {sorted(changes)}")
        return _find(snapshot.expenses, expense_id, "Expense")

    def delete_expense(self, expense_id: str) -> None:
        snapshot = self.repository.load_snapshot()
        _find(snapshot.expenses, expense_id, "Expense")
        remaining = tuple(e for e in snapshot.expenses if e.id != expense_id)
        self._apply(lambda s: s.model_copy(update={"expenses": remaining}))
        logger.info(f"Deleted expense {expense_id}")

    def mark_expense_paid(self, expense_id: str, payment_date: Optional[date] = None) -> Expense:
        snapshot = self.repository.load_snapshot()
        expense = _find(snapshot.expenses, expense_id, "Expense")
        if expense.status == RecordStatus.PAID:
            raise RecordAlreadyPaidError("Expense", expense_id)

        paid = expense.model_copy(update={
            "status": RecordStatus.PAID,
            "payment_date": payment_date or self.today(),
        })
        self._apply(lambda s: s.model_copy(update={"expenses": _replace(s.expenses, paid)}))
        logger.info(f"Expense {expense_id} marked paid on {paid.payment_date}")
        return paid

    # --- Budget ---

    def set_budgets(self, ceilings: Mapping) -> Budget:
        """Replace every category ceiling; categories left out become zero"""
        budget = ceilings if isinstance(ceilings, Budget) else Budget.from_mapping(ceilings)
        self._apply(lambda s: s.model_copy(update={"budget": budget}))
        logger.info("Budget ceilings updated")
        return budget


_EDITABLE_EXPENSE_FIELDS = {"description", "amount", "category", "due_date"}
_KEPT_STUDENT_FIELDS = {"id", "created_at", "status", "status_changed_at", "photo_url"}


def _find(records: Iterable, record_id: str, kind: str):
    for record in records:
        if record.id == record_id:
            return record
    raise RecordNotFoundError(kind, record_id)


def _replace(records: Iterable, updated) -> tuple:
    return tuple(updated if r.id == updated.id else r for r in records)


__all__ = ["BillingService"]
