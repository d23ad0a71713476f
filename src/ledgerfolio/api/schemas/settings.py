"""Pydantic schemas for portfolio settings."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class AllocationTargetSchema(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str = Field(..., min_length=1, max_length=20)
    target_weight: Decimal = Field(..., ge=0, le=100)
    currency: str = Field(default="CAD")

    @field_validator("symbol", "currency")
    @classmethod
    def uppercase(cls, v: str) -> str:
        return v.strip().upper()


class PortfolioSettingsSchema(BaseModel):
    """Weekly amount, FX fee and target weights; used for both request and response."""

    model_config = {"from_attributes": True}

    weekly_amount: Decimal = Field(default=Decimal("0"), ge=0)
    fx_fee_percent: Decimal = Field(default=Decimal("1.5"), ge=0, le=100)
    targets: list[AllocationTargetSchema] = Field(default_factory=list)
