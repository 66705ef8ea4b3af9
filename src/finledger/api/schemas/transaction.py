"""Pydantic schemas for transaction endpoints."""

from datetime import date as Date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from finledger.domain.models.enums import TransactionType


class TransactionCreateRequest(BaseModel):
    """Request schema for creating a transaction."""

    txn_type: TransactionType = Field(
        ..., description="Transaction type; stake and unstake are recorded through /actions"
    )
    asset: str = Field(..., min_length=1, max_length=20, description="Asset symbol")
    account: str = Field(..., min_length=1, max_length=100, description="Account name")
    quantity: Decimal = Field(..., gt=0, description="Positive magnitude of the movement")
    price_local: Decimal = Field(..., ge=0, description="Unit price in local_currency")
    date: Date = Field(..., description="Ledger date")
    local_currency: str = Field(default="USD", min_length=3, max_length=5)
    fx_to_usd: Optional[Decimal] = Field(default=None, gt=0)
    fx_to_vnd: Optional[Decimal] = Field(default=None, gt=0)
    fee_usd: Decimal = Field(default=Decimal("0"), ge=0)
    fee_vnd: Decimal = Field(default=Decimal("0"), ge=0)
    counterparty: Optional[str] = Field(default=None, max_length=100)
    tag: Optional[str] = Field(default=None, max_length=100)
    note: Optional[str] = Field(default=None, max_length=500, description="Optional note")
    internal_flow: bool = False
    borrow_apr: Optional[Decimal] = Field(default=None, ge=0)
    borrow_term_days: Optional[int] = Field(default=None, ge=0)

    @field_validator("asset", "local_currency")
    @classmethod
    def uppercase(cls, v: str) -> str:
        return v.upper()


class TransactionResponse(BaseModel):
    """Response schema for a single transaction."""

    model_config = {"from_attributes": True}

    txn_id: str
    date: Date
    txn_type: TransactionType
    asset: str
    account: str
    quantity: Decimal
    price_local: Decimal
    local_currency: str
    fx_to_usd: Optional[Decimal] = None
    fx_to_vnd: Optional[Decimal] = None
    fee_usd: Decimal
    fee_vnd: Decimal
    counterparty: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None
    internal_flow: bool
    borrow_apr: Optional[Decimal] = None
    borrow_term_days: Optional[int] = None
    investment_id: Optional[str] = None
    investment_account: Optional[str] = None
    horizon: Optional[str] = None
    close_all: bool
    delta_qty: Decimal
    cash_flow_usd: Decimal
    cash_flow_vnd: Decimal
    created_at: Optional[datetime] = None


class TransactionListResponse(BaseModel):
    """Response schema for listing transactions."""

    transactions: list[TransactionResponse]
    count: int
