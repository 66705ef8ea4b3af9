"""Domain models package."""

from finledger.domain.models.enums import TransactionType, PositionStatus
from finledger.domain.models.transaction import Transaction
from finledger.domain.models.investment import CostLot, InvestmentPosition, PositionKey

__all__ = [
    "TransactionType",
    "PositionStatus",
    "Transaction",
    "CostLot",
    "InvestmentPosition",
    "PositionKey",
]
