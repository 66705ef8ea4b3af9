"""Repository layer - data access abstractions and implementations."""

from finledger.repositories.protocols import (
    TransactionFilter,
    TransactionRepository,
    UnitOfWork,
)

__all__ = [
    "TransactionFilter",
    "TransactionRepository",
    "UnitOfWork",
]
