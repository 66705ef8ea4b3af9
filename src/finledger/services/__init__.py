"""Service layer - business logic orchestration."""

from finledger.services.ledger_service import LedgerService, TransactionCreate
from finledger.services.lot_ledger import LotLedger, PositionLockRegistry, get_position_locks
from finledger.services.price_service import PriceService
from finledger.services.holdings_aggregator import HoldingsAggregator
from finledger.services.spending_aggregator import SpendingAggregator
from finledger.services.cashflow_aggregator import CashFlowAggregator
from finledger.services.borrow_projector import BorrowProjector
from finledger.services.reporting_service import ReportingService
from finledger.services.action_service import (
    ActionResult,
    ActionService,
    StakeRequest,
    UnstakeRequest,
)

__all__ = [
    "LedgerService",
    "TransactionCreate",
    "LotLedger",
    "PositionLockRegistry",
    "get_position_locks",
    "PriceService",
    "HoldingsAggregator",
    "SpendingAggregator",
    "CashFlowAggregator",
    "BorrowProjector",
    "ReportingService",
    "ActionResult",
    "ActionService",
    "StakeRequest",
    "UnstakeRequest",
]
