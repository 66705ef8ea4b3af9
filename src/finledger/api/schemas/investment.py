"""Pydantic schemas for investment positions and stake/unstake actions."""

from datetime import date as Date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from finledger.api.schemas.report import RealizedEntryResponse
from finledger.api.schemas.transaction import TransactionResponse
from finledger.domain.models.enums import PositionStatus


class PositionResponse(BaseModel):
    """Response schema for an investment position."""

    model_config = {"from_attributes": True}

    investment_id: str
    asset: str
    account: str
    horizon: Optional[str] = None
    status: PositionStatus
    opened_at: Date
    closed_at: Optional[Date] = None
    deposit_qty: Decimal
    deposit_cost_usd: Decimal
    withdrawal_qty: Decimal
    withdrawal_value_usd: Decimal
    realized_pnl_usd: Decimal
    pnl_percent: Decimal
    quantity_remaining: Decimal
    average_unit_cost_usd: Optional[Decimal] = None


class InvestmentSummaryResponse(BaseModel):
    """Response schema for totals across all positions."""

    model_config = {"from_attributes": True}

    total_positions: int
    open_positions: int
    closed_positions: int
    total_deposit_cost_usd: Decimal
    total_withdrawal_value_usd: Decimal
    realized_pnl_usd: Decimal
    roi_percent: Decimal


class StakeRequestSchema(BaseModel):
    """Request schema for staking an asset into an investment account."""

    date: Date
    source_account: str = Field(..., min_length=1, max_length=100)
    investment_account: str = Field(..., min_length=1, max_length=100)
    asset: str = Field(..., min_length=1, max_length=20)
    amount: Decimal = Field(..., gt=0)
    fee_percent: Decimal = Field(default=Decimal("0"), ge=0, lt=100)
    entry_price_usd: Optional[Decimal] = Field(default=None, ge=0)
    fx_to_vnd: Optional[Decimal] = Field(default=None, gt=0)
    horizon: Optional[str] = Field(default=None, max_length=50)
    counterparty: Optional[str] = Field(default=None, max_length=100)
    tag: Optional[str] = Field(default=None, max_length=100)
    note: Optional[str] = Field(default=None, max_length=500)

    @field_validator("asset")
    @classmethod
    def uppercase_asset(cls, v: str) -> str:
        return v.upper()


class UnstakeRequestSchema(BaseModel):
    """Request schema for taking funds out of a position."""

    date: Date
    investment_id: str = Field(..., min_length=1)
    destination_account: str = Field(..., min_length=1, max_length=100)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    close_all: bool = False
    exit_price_usd: Optional[Decimal] = Field(default=None, ge=0)
    fx_to_vnd: Optional[Decimal] = Field(default=None, gt=0)
    counterparty: Optional[str] = Field(default=None, max_length=100)
    tag: Optional[str] = Field(default=None, max_length=100)
    note: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def amount_or_close_all(self) -> "UnstakeRequestSchema":
        if self.amount is None and not self.close_all:
            raise ValueError("amount is required unless close_all is set")
        return self


class ActionResponse(BaseModel):
    """Response schema for a completed stake or unstake."""

    position: PositionResponse
    transactions: list[TransactionResponse]
    realized: Optional[RealizedEntryResponse] = None
