"""Unit-of-work protocol for writes that must commit together."""

from typing import Protocol

from finledger.repositories.protocols.transaction_repo import TransactionRepository


class UnitOfWork(Protocol):
    """
    Scope in which repository writes are staged and committed as one.

    Used as a context manager: leaving the block without commit(), or with
    an exception, discards everything staged inside it.
    """

    transactions: TransactionRepository

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...

    def commit(self) -> None:
        """Commit staged writes or raise InconsistentAtomicityError."""
        ...

    def rollback(self) -> None:
        """Discard staged writes."""
        ...
