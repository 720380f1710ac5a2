# tutorbook/api/routers/budgets.py
from fastapi import APIRouter, Body, Depends
from pydantic import Field
from typing import Annotated, Dict
from decimal import Decimal
import logging

from tutorbook.api.deps.service import get_billing_service
from tutorbook.engine.records import ExpenseCategory
from tutorbook.services.billing_service import BillingService

logger = logging.getLogger(__name__)
router = APIRouter()

Ceiling = Annotated[Decimal, Field(ge=0, decimal_places=2)]


@router.get("/", response_model=Dict[str, Decimal])
async def get_budgets(service: BillingService = Depends(get_billing_service)):
    """Monthly ceiling for every category; zero means no ceiling set"""
    return service.repository.load_snapshot().budget.to_mapping()


@router.put("/", response_model=Dict[str, Decimal])
async def set_budgets(
    ceilings: Dict[ExpenseCategory, Ceiling] = Body(..., examples=[{"Rent": "1500.00", "Marketing": "300.00"}]),
    service: BillingService = Depends(get_billing_service),
):
    """Replace all ceilings; categories left out of the body are reset to zero"""
    return service.set_budgets(ceilings).to_mapping()
