"""Enumerations for domain models."""

from enum import Enum


class TransactionType(str, Enum):
    """Types of ledger transactions."""

    BUY = "buy"
    SELL = "sell"
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    BORROW = "borrow"
    REPAY_BORROW = "repay_borrow"
    INTEREST = "interest"
    STAKE = "stake"
    UNSTAKE = "unstake"
    FEE = "fee"
    INTEREST_EXPENSE = "interest_expense"


class PositionStatus(str, Enum):
    """Lifecycle state of an investment position."""

    OPEN = "open"
    CLOSED = "closed"
