"""Pydantic schemas for report endpoints."""

from datetime import date as Date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class HoldingResponse(BaseModel):
    """Response schema for one holding line."""

    model_config = {"from_attributes": True}

    asset: str
    account: Optional[str] = None
    quantity: Decimal
    price_usd: Optional[Decimal] = None
    value_usd: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    price_error: Optional[str] = None


class HoldingsResponse(BaseModel):
    """Response schema for holdings as of a date."""

    as_of: Date
    items: list[HoldingResponse]
    total_value_usd: Decimal
    unpriced: list[str]


class SpendingGroupResponse(BaseModel):
    model_config = {"from_attributes": True}

    key: str
    amount_usd: Decimal
    amount_vnd: Decimal
    count: int
    percentage: Decimal


class ExpenseItemResponse(BaseModel):
    model_config = {"from_attributes": True}

    txn_id: str
    date: Date
    account: str
    asset: str
    amount_usd: Decimal
    amount_vnd: Decimal
    tag: Optional[str] = None
    counterparty: Optional[str] = None
    note: Optional[str] = None


class SpendingResponse(BaseModel):
    """Response schema for a spending report."""

    start_date: Date
    end_date: Date
    total_usd: Decimal
    total_vnd: Decimal
    by_tag: list[SpendingGroupResponse]
    by_counterparty: list[SpendingGroupResponse]
    top_expenses: list[ExpenseItemResponse]


class CashFlowBucketResponse(BaseModel):
    model_config = {"from_attributes": True}

    inflow_usd: Decimal
    outflow_usd: Decimal
    net_usd: Decimal
    inflow_vnd: Decimal
    outflow_vnd: Decimal
    net_vnd: Decimal
    count: int


class CashFlowResponse(BaseModel):
    """Response schema for a cash-flow report."""

    start_date: Date
    end_date: Date
    totals: CashFlowBucketResponse
    operating: CashFlowBucketResponse
    financing: CashFlowBucketResponse
    by_type: dict[str, CashFlowBucketResponse]
    by_tag: dict[str, CashFlowBucketResponse]


class AssetPnlResponse(BaseModel):
    model_config = {"from_attributes": True}

    asset: str
    realized_pnl_usd: Decimal
    deposit_cost_usd: Decimal
    proceeds_usd: Decimal
    roi_percent: Decimal


class RealizedEntryResponse(BaseModel):
    model_config = {"from_attributes": True}

    investment_id: str
    asset: str
    account: str
    date: Date
    quantity: Decimal
    proceeds_usd: Decimal
    cost_basis_usd: Decimal
    realized_pnl_usd: Decimal
    closed_position: bool


class PnlResponse(BaseModel):
    """Response schema for realized PnL over a period."""

    start_date: Date
    end_date: Date
    realized_pnl_usd: Decimal
    deposit_cost_usd: Decimal
    roi_percent: Decimal
    by_asset: list[AssetPnlResponse]
    entries: list[RealizedEntryResponse]


class OutflowProjectionResponse(BaseModel):
    model_config = {"from_attributes": True}

    account: str
    asset: str
    as_of: Date
    remaining_principal: Decimal
    interest_accrued: Decimal
    total_outflow: Decimal
    borrow_ids: list[str]


class OutstandingBorrowResponse(BaseModel):
    model_config = {"from_attributes": True}

    account: str
    asset: str
    borrowed: Decimal
    repaid: Decimal
    outstanding: Decimal
