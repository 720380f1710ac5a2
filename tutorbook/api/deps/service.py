# tutorbook/api/deps/service.py - Billing service dependency shared by every router
from functools import lru_cache
import logging

from tutorbook.core.config import settings
from tutorbook.core.db import db_manager
from tutorbook.services.billing_service import BillingService
from tutorbook.services.repository import build_repository

logger = logging.getLogger(__name__)


@lru_cache
def get_billing_service() -> BillingService:
    """
    Build the process-wide billing service from settings.

    Tests replace it through ``app.dependency_overrides``.
    """
    repository = build_repository(settings, db=db_manager)
    logger.info(f"Billing service using the {repository.name} storage backend")
    return BillingService(repository, default_due_day=settings.DEFAULT_PAYMENT_DUE_DAY)
