"""Weekly allocation plan endpoint."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ledgerfolio.api.deps import get_allocation_service
from ledgerfolio.api.schemas import AllocationPlanResponse
from ledgerfolio.services import AllocationService

router = APIRouter(prefix="/allocation", tags=["allocation"])


@router.get("/plan", response_model=AllocationPlanResponse)
def get_plan(
    weekly_amount: Optional[Decimal] = Query(None, ge=0, description="Overrides the saved amount"),
    allocation: AllocationService = Depends(get_allocation_service),
) -> AllocationPlanResponse:
    """Split this week's contribution across targets, favouring underweight ones."""
    return AllocationPlanResponse.model_validate(allocation.build_plan(weekly_amount))
