"""Transaction repository protocol."""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from finledger.domain.models import Transaction, TransactionType


@dataclass
class TransactionFilter:
    """Query predicates; unset fields do not constrain the result."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    txn_types: Optional[list[TransactionType]] = None
    accounts: Optional[list[str]] = None
    assets: Optional[list[str]] = None
    investment_id: Optional[str] = None


class TransactionRepository(Protocol):
    """Interface for the append-only transaction store."""

    def create(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        ...

    def create_many(self, transactions: list[Transaction]) -> list[Transaction]:
        """Persist several transactions in one storage transaction."""
        ...

    def get_by_id(self, txn_id: str) -> Optional[Transaction]:
        """Retrieve transaction by ID."""
        ...

    def query(self, txn_filter: Optional[TransactionFilter] = None) -> list[Transaction]:
        """Query transactions, ordered by date then insertion."""
        ...
