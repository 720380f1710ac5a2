"""Tests for the billing service commands and diff-before-write."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from tutorbook.core.exceptions import RecordAlreadyPaidError, RecordNotFoundError
from tutorbook.engine.records import ExpenseCategory, RecordStatus, StudentStatus
from tutorbook.services.repository import CollectionKey

STUDENT = {"full_name": "Ana Souza", "monthly_fee": Decimal("250"), "payment_due_day": 10}
GUARDIAN = {"full_name": "Maria Souza", "relationship": "mother"}


class TestRefresh:
    def test_refresh_generates_and_persists(self, seeded_service, seeded_repository):
        snapshot = seeded_service.refresh()

        assert {p.id for p in snapshot.payments} == {"s1-2024-03", "s2-2024-03"}
        assert seeded_repository.writes == [CollectionKey.PAYMENTS]

    def test_unchanged_snapshot_writes_nothing(self, seeded_service, seeded_repository):
        seeded_service.refresh()
        seeded_repository.writes.clear()

        seeded_service.refresh()

        assert seeded_repository.writes == []

    def test_time_passing_marks_overdue(self, seeded_service, seeded_repository, clock):
        seeded_service.refresh()
        clock.now = datetime(2024, 3, 21, 8, 0)

        snapshot = seeded_service.refresh()

        statuses = {p.id: p.status for p in snapshot.payments}
        assert statuses["s2-2024-03"] == RecordStatus.OVERDUE
        assert snapshot.expenses[0].status == RecordStatus.OVERDUE

    def test_new_month_adds_new_obligations(self, seeded_service, clock):
        seeded_service.refresh()
        clock.now = datetime(2024, 4, 1, 8, 0)

        snapshot = seeded_service.refresh()

        assert len(snapshot.payments) == 4


class TestStudents:
    def test_register_creates_current_obligation(self, service, repository):
        registration = service.register_student(STUDENT, GUARDIAN)

        snapshot = repository.load_snapshot()
        assert registration.student.status == StudentStatus.ACTIVE
        assert registration.student.created_at == datetime(2024, 3, 15, 9, 30)
        [payment] = snapshot.payments
        assert payment.id == f"{registration.student.id}-2024-03"
        assert payment.status == RecordStatus.OVERDUE

    def test_missing_due_day_uses_default(self, repository, clock):
        from tutorbook.services.billing_service import BillingService

        service = BillingService(repository, clock=clock, default_due_day=5)
        registration = service.register_student({**STUDENT, "payment_due_day": None}, GUARDIAN)

        assert registration.student.payment_due_day == 5

    def test_import_registrations(self, service, repository):
        rows = [(STUDENT, GUARDIAN), ({**STUDENT, "full_name": "Bruno"}, {"full_name": "Paulo"})]

        imported = service.import_registrations(rows)

        assert len(imported) == 2
        assert len(repository.load_snapshot().payments) == 2

    def test_archive_sets_timestamp_once(self, service, clock):
        registration = service.register_student(STUDENT, GUARDIAN)
        clock.now = datetime(2024, 3, 20, 10, 0)

        archived = service.change_student_status(registration.student.id, StudentStatus.INACTIVE)
        clock.now = datetime(2024, 3, 21, 10, 0)
        again = service.change_student_status(registration.student.id, StudentStatus.INACTIVE)

        assert archived.status_changed_at == datetime(2024, 3, 20, 10, 0)
        assert again.status_changed_at == datetime(2024, 3, 20, 10, 0)

    def test_archived_student_gets_no_new_obligations(self, service, repository, clock):
        registration = service.register_student(STUDENT, GUARDIAN)
        service.change_student_status(registration.student.id, StudentStatus.INACTIVE)
        clock.now = datetime(2024, 4, 15, 9, 0)

        snapshot = service.refresh()

        assert [p.id for p in snapshot.payments] == [f"{registration.student.id}-2024-03"]

    def test_edit_does_not_reprice_existing_obligation(self, service, repository, clock):
        registration = service.register_student(STUDENT, GUARDIAN)
        student_id = registration.student.id

        edited = service.update_registration(
            student_id,
            {**STUDENT, "full_name": "Ana S. Lima", "monthly_fee": Decimal("300")},
            {**GUARDIAN, "phone": "555-0100"},
        )

        assert edited.student.id == student_id
        assert edited.student.created_at == registration.student.created_at
        assert edited.guardian.phone == "555-0100"
        [march] = repository.load_snapshot().payments
        assert march.student_name == "Ana Souza"
        assert march.amount == Decimal("250")

        clock.now = datetime(2024, 4, 2, 9, 0)
        april = next(p for p in service.refresh().payments if p.id == f"{student_id}-2024-04")
        assert april.amount == Decimal("300")
        assert april.student_name == "Ana S. Lima"

    def test_edit_keeps_status_and_photo(self, service):
        registration = service.register_student({**STUDENT, "photo_url": "https://img/ana.png"}, GUARDIAN)
        service.change_student_status(registration.student.id, StudentStatus.INACTIVE)

        edited = service.update_registration(
            registration.student.id,
            {**STUDENT, "photo_url": None, "status": StudentStatus.ACTIVE},
            GUARDIAN,
        )

        assert edited.student.status == StudentStatus.INACTIVE
        assert edited.student.photo_url == "https://img/ana.png"

    def test_edit_unknown_student(self, service):
        with pytest.raises(RecordNotFoundError):
            service.update_registration("missing", STUDENT, GUARDIAN)

    def test_unknown_student(self, service):
        with pytest.raises(RecordNotFoundError):
            service.change_student_status("missing", StudentStatus.INACTIVE)


class TestPayments:
    def test_mark_paid_defaults_to_today(self, seeded_service, seeded_repository):
        seeded_service.refresh()

        paid = seeded_service.mark_payment_paid("s1-2024-03")

        assert paid.status == RecordStatus.PAID
        assert paid.payment_date == date(2024, 3, 15)
        stored = {p.id: p for p in seeded_repository.load_snapshot().payments}
        assert stored["s1-2024-03"].status == RecordStatus.PAID

    def test_paying_twice_is_rejected(self, seeded_service):
        seeded_service.refresh()
        seeded_service.mark_payment_paid("s1-2024-03", date(2024, 3, 12))

        with pytest.raises(RecordAlreadyPaidError):
            seeded_service.mark_payment_paid("s1-2024-03")

    def test_paid_record_survives_later_passes(self, seeded_service, clock):
        seeded_service.refresh()
        seeded_service.mark_payment_paid("s2-2024-03", date(2024, 3, 14))
        clock.now = datetime(2024, 3, 30)

        snapshot = seeded_service.refresh()

        paid = next(p for p in snapshot.payments if p.id == "s2-2024-03")
        assert paid.status == RecordStatus.PAID
        assert paid.payment_date == date(2024, 3, 14)

    def test_unknown_payment(self, service):
        with pytest.raises(RecordNotFoundError):
            service.mark_payment_paid("nope-2024-03")


class TestExpenses:
    def test_create_past_due_expense_is_overdue(self, service):
        expense = service.create_expense({
            "description": "Printer ink",
            "amount": Decimal("80"),
            "category": ExpenseCategory.SUPPLIES,
            "due_date": date(2024, 3, 1),
        })
        assert expense.id.startswith("exp-")
        assert expense.status == RecordStatus.OVERDUE

    def test_update_only_editable_fields(self, seeded_service):
        updated = seeded_service.update_expense("e1", {
            "amount": Decimal("120"),
            "status": RecordStatus.PAID,
        })
        assert updated.amount == Decimal("120")
        assert updated.status == RecordStatus.PENDING

    def test_paid_expense_cannot_be_edited(self, seeded_service):
        seeded_service.mark_expense_paid("e1")
        with pytest.raises(RecordAlreadyPaidError):
            seeded_service.update_expense("e1", {"amount": Decimal("1")})

    def test_delete(self, seeded_service, seeded_repository):
        seeded_service.delete_expense("e1")
        assert seeded_repository.load_snapshot().expenses == ()

        with pytest.raises(RecordNotFoundError):
            seeded_service.delete_expense("e1")


class TestBudgets:
    def test_set_budgets_fills_every_category(self, service, repository):
        service.set_budgets({"Rent": Decimal("1500")})

        budget = repository.load_snapshot().budget
        assert budget.ceiling(ExpenseCategory.RENT) == Decimal("1500")
        assert budget.ceiling(ExpenseCategory.TRAVEL) == Decimal("0")

    def test_same_budget_is_not_rewritten(self, service, repository):
        service.set_budgets({"Rent": Decimal("1500")})
        repository.writes.clear()

        service.set_budgets({"Rent": Decimal("1500")})

        assert CollectionKey.BUDGETS not in repository.writes

    def test_budget_cannot_be_changed_in_place(self, service, repository):
        budget = service.set_budgets({"Rent": Decimal("1500")})

        mapping = budget.to_mapping()
        mapping["Rent"] = Decimal("1")

        assert isinstance(budget.ceilings, tuple)
        assert repository.load_snapshot().budget.ceiling(ExpenseCategory.RENT) == Decimal("1500")
