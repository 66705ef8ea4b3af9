"""Repository protocols (interfaces)."""

from finledger.repositories.protocols.transaction_repo import (
    TransactionFilter,
    TransactionRepository,
)
from finledger.repositories.protocols.unit_of_work import UnitOfWork

__all__ = [
    "TransactionFilter",
    "TransactionRepository",
    "UnitOfWork",
]
