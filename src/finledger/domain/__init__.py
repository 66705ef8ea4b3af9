"""Domain layer - pure business models with no external dependencies."""

from finledger.domain.models import (
    Transaction,
    TransactionType,
    PositionStatus,
    CostLot,
    InvestmentPosition,
    PositionKey,
)
from finledger.domain.views import Period

__all__ = [
    "Transaction",
    "TransactionType",
    "PositionStatus",
    "CostLot",
    "InvestmentPosition",
    "PositionKey",
    "Period",
]
