"""Tests for the combined generate + reconcile pass."""

from datetime import date

from tests.factories import make_expense, make_payment, make_registration
from tutorbook.engine.records import RecordStatus, Snapshot, StudentStatus
from tutorbook.engine.snapshot import reconcile_and_generate


class TestReconcileAndGenerate:
    def test_generates_and_reconciles(self):
        snapshot = Snapshot(
            registrations=(make_registration("s1"),),
            payments=(make_payment("s1-2024-02", due=date(2024, 2, 10)),),
            expenses=(make_expense(due=date(2024, 3, 1)),),
        )

        updated = reconcile_and_generate(snapshot, date(2024, 3, 15))

        by_id = {p.id: p for p in updated.payments}
        assert set(by_id) == {"s1-2024-02", "s1-2024-03"}
        assert by_id["s1-2024-02"].status == RecordStatus.OVERDUE
        assert by_id["s1-2024-03"].status == RecordStatus.OVERDUE
        assert updated.expenses[0].status == RecordStatus.OVERDUE

    def test_unchanged_snapshot_is_returned_as_is(self):
        snapshot = Snapshot(
            registrations=(make_registration("s1"),),
            payments=(make_payment("s1-2024-03", due=date(2024, 3, 20)),),
        )
        assert reconcile_and_generate(snapshot, date(2024, 3, 15)) is snapshot

    def test_second_pass_is_a_no_op(self):
        snapshot = Snapshot(registrations=(make_registration("s1"), make_registration("s2", due_day=28)))
        once = reconcile_and_generate(snapshot, date(2024, 3, 15))
        assert once != snapshot
        assert reconcile_and_generate(once, date(2024, 3, 15)) is once

    def test_inactive_student_history_is_kept(self):
        snapshot = Snapshot(
            registrations=(make_registration("s1", status=StudentStatus.INACTIVE),),
            payments=(make_payment("s1-2024-02", due=date(2024, 2, 10), status=RecordStatus.PAID,
                                   paid_on=date(2024, 2, 9)),),
        )
        assert reconcile_and_generate(snapshot, date(2024, 3, 15)) is snapshot
