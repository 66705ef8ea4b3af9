"""View models for report outputs."""

from finledger.domain.views.reports import (
    Period,
    HoldingsSnapshot,
    HoldingsView,
    SpendingGroup,
    ExpenseItem,
    SpendingReport,
    CashFlowBucket,
    CashFlowReport,
    RealizedEntry,
    AssetPnL,
    PnLReport,
    InvestmentSummary,
    OutflowProjection,
    OutstandingBorrow,
)

__all__ = [
    "Period",
    "HoldingsSnapshot",
    "HoldingsView",
    "SpendingGroup",
    "ExpenseItem",
    "SpendingReport",
    "CashFlowBucket",
    "CashFlowReport",
    "RealizedEntry",
    "AssetPnL",
    "PnLReport",
    "InvestmentSummary",
    "OutflowProjection",
    "OutstandingBorrow",
]
