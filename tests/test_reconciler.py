"""Tests for the pending -> overdue status pass."""

from datetime import date, datetime

from tests.factories import make_expense, make_payment
from tutorbook.engine.reconciler import has_changes, is_past_due, reconcile
from tutorbook.engine.records import Budget, RecordStatus


class TestReconcile:
    def test_pending_past_due_becomes_overdue(self):
        [payment] = reconcile([make_payment(due=date(2024, 3, 10))], date(2024, 3, 15))
        assert payment.status == RecordStatus.OVERDUE

    def test_due_today_stays_pending(self):
        record = make_payment(due=date(2024, 3, 15))
        assert reconcile([record], datetime(2024, 3, 15, 22, 0)) == [record]

    def test_unchanged_records_are_the_same_objects(self):
        future = make_payment("a", due=date(2024, 4, 10))
        paid = make_payment("b", status=RecordStatus.PAID, paid_on=date(2024, 3, 1))
        overdue = make_payment("c", status=RecordStatus.OVERDUE)

        result = reconcile([future, paid, overdue], date(2024, 3, 15))

        assert all(after is before for before, after in zip([future, paid, overdue], result))

    def test_paid_is_never_touched(self):
        paid = make_expense(due=date(2024, 1, 1), status=RecordStatus.PAID, paid_on=date(2024, 1, 2))
        assert reconcile([paid], date(2024, 3, 15))[0].status == RecordStatus.PAID

    def test_idempotent(self):
        records = [make_payment("a", due=date(2024, 3, 1)), make_payment("b", due=date(2024, 3, 30))]
        once = reconcile(records, date(2024, 3, 15))
        assert reconcile(once, date(2024, 3, 15)) == once

    def test_overdue_never_reverts_with_earlier_reference(self):
        once = reconcile([make_payment(due=date(2024, 3, 10))], date(2024, 3, 15))
        again = reconcile(once, date(2024, 3, 1))
        assert again[0].status == RecordStatus.OVERDUE

    def test_works_for_expenses(self):
        [expense] = reconcile([make_expense(due=date(2024, 3, 14))], date(2024, 3, 15))
        assert expense.status == RecordStatus.OVERDUE

    def test_empty_input(self):
        assert reconcile([], date(2024, 3, 15)) == []


class TestHelpers:
    def test_is_past_due_only_for_pending(self):
        assert is_past_due(make_payment(due=date(2024, 3, 1)), date(2024, 3, 15))
        assert not is_past_due(make_payment(due=date(2024, 3, 1), status=RecordStatus.OVERDUE), date(2024, 3, 15))

    def test_has_changes(self):
        records = [make_payment(due=date(2024, 3, 1))]
        assert not has_changes(records, reconcile(records, date(2024, 2, 1)))
        assert has_changes(records, reconcile(records, date(2024, 3, 15)))

    def test_has_changes_compares_budgets_by_value(self):
        assert not has_changes(Budget.from_mapping({"Rent": "100"}), Budget.from_mapping({"Rent": "100.00"}))
        assert has_changes(Budget(), Budget.from_mapping({"Rent": "100"}))
