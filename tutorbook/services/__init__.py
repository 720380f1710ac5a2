# tutorbook/services/__init__.py
from tutorbook.services.billing_service import BillingService
from tutorbook.services.repository import (
    CollectionKey,
    InMemoryRepository,
    JsonFileRepository,
    SnapshotRepository,
    SqlRepository,
    build_repository,
)

__all__ = [
    "BillingService",
    "CollectionKey",
    "InMemoryRepository",
    "JsonFileRepository",
    "SnapshotRepository",
    "SqlRepository",
    "build_repository",
]
