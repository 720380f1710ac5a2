# tutorbook/services/repository.py - Persistence gateway: whole-collection load/save
import enum
import logging
from decimal import Decimal
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import TypeAdapter
from sqlalchemy import select, delete

from tutorbook import models
from tutorbook.core.db import DatabaseManager
from tutorbook.engine.records import Budget, Expense, Guardian, Payment, Registration, Snapshot, Student

logger = logging.getLogger(__name__)


class CollectionKey(str, enum.Enum):
    REGISTRATIONS = "registrations"
    PAYMENTS = "payments"
    EXPENSES = "expenses"
    BUDGETS = "budgets"


_ADAPTERS: Dict[CollectionKey, TypeAdapter] = {
    CollectionKey.REGISTRATIONS: TypeAdapter(tuple[Registration, ...]),
    CollectionKey.PAYMENTS: TypeAdapter(tuple[Payment, ...]),
    CollectionKey.EXPENSES: TypeAdapter(tuple[Expense, ...]),
}


def default_for(key: CollectionKey) -> Any:
    """Value returned by ``load`` when a collection has never been saved"""
    if key == CollectionKey.BUDGETS:
        return Budget()
    return ()


class SnapshotRepository(ABC):
    """
    Storage for the four collections the engine reads and writes.

    Every save replaces the whole collection. There is a single writer at a
    time, so no finer-grained locking is attempted.
    """

    name = "abstract"

    @abstractmethod
    def load(self, key: CollectionKey) -> Any:
        """Return the stored collection, or its default if none was saved"""

    @abstractmethod
    def save(self, key: CollectionKey, collection: Any) -> None:
        """Replace the stored collection"""

    def load_snapshot(self) -> Snapshot:
        return Snapshot(
            registrations=self.load(CollectionKey.REGISTRATIONS),
            payments=self.load(CollectionKey.PAYMENTS),
            expenses=self.load(CollectionKey.EXPENSES),
            budget=self.load(CollectionKey.BUDGETS),
        )

    def save_snapshot(self, snapshot: Snapshot) -> None:
        self.save(CollectionKey.REGISTRATIONS, snapshot.registrations)
        self.save(CollectionKey.PAYMENTS, snapshot.payments)
        self.save(CollectionKey.EXPENSES, snapshot.expenses)
        self.save(CollectionKey.BUDGETS, snapshot.budget)


class InMemoryRepository(SnapshotRepository):
    """Process-local storage; records are frozen so they can be shared safely"""

    name = "memory"

    def __init__(self, snapshot: Optional[Snapshot] = None):
        self._collections: Dict[CollectionKey, Any] = {}
        self.writes: list[CollectionKey] = []
        if snapshot is not None:
            self.save_snapshot(snapshot)
            self.writes.clear()

    def load(self, key: CollectionKey) -> Any:
        return self._collections.get(key, default_for(key))

    def save(self, key: CollectionKey, collection: Any) -> None:
        self._collections[key] = collection if key == CollectionKey.BUDGETS else tuple(collection)
        self.writes.append(key)


class JsonFileRepository(SnapshotRepository):
    """
    One JSON document per collection under ``data_dir``.

    Field names are camelCase, dates are ``YYYY-MM-DD`` and timestamps
    ISO-8601, which is what pydantic's JSON mode produces for these records.
    """

    name = "json"

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: CollectionKey) -> Path:
        return self.data_dir / f"{key.value}.json"

    def load(self, key: CollectionKey) -> Any:
        path = self._path(key)
        if not path.exists():
            return default_for(key)

        if key == CollectionKey.BUDGETS:
            # Stored as a plain Category -> amount map
            mapping = TypeAdapter(dict[str, Optional[Decimal]]).validate_json(path.read_bytes())
            return Budget.from_mapping(mapping)
        return _ADAPTERS[key].validate_json(path.read_bytes())

    def save(self, key: CollectionKey, collection: Any) -> None:
        path = self._path(key)
        if key == CollectionKey.BUDGETS:
            payload = TypeAdapter(dict[str, Decimal]).dump_json(collection.to_mapping(), indent=2)
        else:
            payload = _ADAPTERS[key].dump_json(tuple(collection), by_alias=True, indent=2)

        # Write-then-rename so a crash never leaves a half-written collection
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_bytes(payload)
        tmp_path.replace(path)
        logger.debug(f"Saved {key.value} to {path}")


class SqlRepository(SnapshotRepository):
    """Relational storage through SQLAlchemy; each save runs in one transaction"""

    name = "sql"

    def __init__(self, db: DatabaseManager):
        self.db = db

    def load(self, key: CollectionKey) -> Any:
        with self.db.transaction() as session:
            if key == CollectionKey.REGISTRATIONS:
                rows = session.execute(select(models.Student).order_by(models.Student.created_at)).scalars().all()
                return tuple(self._registration_from_row(row) for row in rows)

            if key == CollectionKey.PAYMENTS:
                rows = session.execute(select(models.Payment).order_by(models.Payment.due_date, models.Payment.id)).scalars().all()
                return tuple(Payment.model_validate(row) for row in rows)

            if key == CollectionKey.EXPENSES:
                rows = session.execute(select(models.Expense).order_by(models.Expense.due_date, models.Expense.id)).scalars().all()
                return tuple(Expense.model_validate(row) for row in rows)

            rows = session.execute(select(models.BudgetCeiling)).scalars().all()
            return Budget.from_mapping({row.category: row.amount for row in rows})

    def save(self, key: CollectionKey, collection: Any) -> None:
        with self.db.transaction() as session:
            if key == CollectionKey.REGISTRATIONS:
                self._replace(session, models.Student, models.Student.id,
                              [self._row_from_registration(r) for r in collection])
            elif key == CollectionKey.PAYMENTS:
                self._replace(session, models.Payment, models.Payment.id,
                              [self._row_from_payment(p) for p in collection])
            elif key == CollectionKey.EXPENSES:
                self._replace(session, models.Expense, models.Expense.id,
                              [self._row_from_expense(e) for e in collection])
            else:
                self._replace(session, models.BudgetCeiling, models.BudgetCeiling.category,
                              [models.BudgetCeiling(category=category, amount=amount)
                               for category, amount in collection.to_mapping().items()])
        logger.debug(f"Saved {key.value} collection")

    @staticmethod
    def _replace(session, model, id_column, rows) -> None:
        keep_ids = [getattr(row, id_column.key) for row in rows]
        session.execute(delete(model).where(id_column.notin_(keep_ids)))
        for row in rows:
            session.merge(row)

    @staticmethod
    def _registration_from_row(row: models.Student) -> Registration:
        guardian = row.guardian
        return Registration(
            student=Student.model_validate(row),
            guardian=Guardian.model_validate(guardian) if guardian else Guardian(full_name=""),
        )

    @staticmethod
    def _row_from_payment(payment: Payment) -> models.Payment:
        return models.Payment(
            id=payment.id,
            student_id=payment.student_id,
            student_name=payment.student_name,
            amount=payment.amount,
            due_date=payment.due_date,
            payment_date=payment.payment_date,
            status=payment.status.value,
        )

    @staticmethod
    def _row_from_expense(expense: Expense) -> models.Expense:
        return models.Expense(
            id=expense.id,
            description=expense.description,
            amount=expense.amount,
            category=expense.category.value,
            due_date=expense.due_date,
            payment_date=expense.payment_date,
            status=expense.status.value,
        )

    @staticmethod
    def _row_from_registration(registration: Registration) -> models.Student:
        fields = registration.student.model_dump()
        fields["status"] = registration.student.status.value
        fields["subjects_of_interest"] = list(registration.student.subjects_of_interest)
        guardian = models.Guardian(student_id=registration.student.id, **registration.guardian.model_dump())
        return models.Student(**fields, guardian=guardian)


def build_repository(settings, db: Optional[DatabaseManager] = None) -> SnapshotRepository:
    """Pick the storage backend named by ``STORAGE_BACKEND``"""
    backend = settings.STORAGE_BACKEND
    if backend == "json":
        return JsonFileRepository(settings.DATA_DIR)
    if backend == "memory":
        return InMemoryRepository()

    db = db or DatabaseManager(settings.DATABASE_URL)
    db.create_all()
    return SqlRepository(db)


__all__ = [
    "CollectionKey",
    "SnapshotRepository",
    "InMemoryRepository",
    "JsonFileRepository",
    "SqlRepository",
    "build_repository",
    "default_for",
]
