"""Pydantic schemas for API request/response."""

from finledger.api.schemas.transaction import (
    TransactionCreateRequest,
    TransactionResponse,
    TransactionListResponse,
)
from finledger.api.schemas.report import (
    HoldingResponse,
    HoldingsResponse,
    SpendingGroupResponse,
    ExpenseItemResponse,
    SpendingResponse,
    CashFlowBucketResponse,
    CashFlowResponse,
    AssetPnlResponse,
    RealizedEntryResponse,
    PnlResponse,
    OutflowProjectionResponse,
    OutstandingBorrowResponse,
)
from finledger.api.schemas.investment import (
    PositionResponse,
    InvestmentSummaryResponse,
    StakeRequestSchema,
    UnstakeRequestSchema,
    ActionResponse,
)

__all__ = [
    "TransactionCreateRequest",
    "TransactionResponse",
    "TransactionListResponse",
    "HoldingResponse",
    "HoldingsResponse",
    "SpendingGroupResponse",
    "ExpenseItemResponse",
    "SpendingResponse",
    "CashFlowBucketResponse",
    "CashFlowResponse",
    "AssetPnlResponse",
    "RealizedEntryResponse",
    "PnlResponse",
    "OutflowProjectionResponse",
    "OutstandingBorrowResponse",
    "PositionResponse",
    "InvestmentSummaryResponse",
    "StakeRequestSchema",
    "UnstakeRequestSchema",
    "ActionResponse",
]
