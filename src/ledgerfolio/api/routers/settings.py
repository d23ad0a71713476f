"""Portfolio settings endpoints."""

from fastapi import APIRouter, Depends

from ledgerfolio.api.deps import get_settings_service
from ledgerfolio.api.schemas import PortfolioSettingsSchema
from ledgerfolio.domain.models import AllocationTarget, PortfolioSettings
from ledgerfolio.services import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/portfolio", response_model=PortfolioSettingsSchema)
def get_portfolio_settings(
    service: SettingsService = Depends(get_settings_service),
) -> PortfolioSettingsSchema:
    return PortfolioSettingsSchema.model_validate(service.get())


@router.post("/portfolio", response_model=PortfolioSettingsSchema)
def save_portfolio_settings(
    request: PortfolioSettingsSchema,
    service: SettingsService = Depends(get_settings_service),
) -> PortfolioSettingsSchema:
    """Replace the weekly amount, FX fee and target weights."""
    saved = service.save(
        PortfolioSettings(
            weekly_amount=request.weekly_amount,
            fx_fee_percent=request.fx_fee_percent,
            targets=[
                AllocationTarget(
                    symbol=t.symbol,
                    target_weight=t.target_weight,
                    currency=t.currency,
                )
                for t in request.targets
            ],
        )
    )
    return PortfolioSettingsSchema.model_validate(saved)
