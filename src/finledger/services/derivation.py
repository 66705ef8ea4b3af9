"""
Derivation rules: raw transaction -> signed quantity delta and cash flows.

Every function here is pure. Callers may derive the same transaction any
number of times and always get the same answer.
"""

import dataclasses
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

from finledger.core.exceptions import ValidationError
from finledger.domain.models import Transaction, TransactionType

DEFAULT_CREDIT_ACCOUNTS = frozenset({"CreditCard"})

ZERO = Decimal("0")

# Holdings direction
INCREASING_TYPES = frozenset({
    TransactionType.BUY,
    TransactionType.TRANSFER_IN,
    TransactionType.INCOME,
    TransactionType.INTEREST,
    TransactionType.BORROW,
    TransactionType.UNSTAKE,
})
DECREASING_TYPES = frozenset({
    TransactionType.SELL,
    TransactionType.TRANSFER_OUT,
    TransactionType.EXPENSE,
    TransactionType.REPAY_BORROW,
    TransactionType.STAKE,
    TransactionType.FEE,
    TransactionType.INTEREST_EXPENSE,
})

# Cash direction: outflows cost amount + fee, inflows yield amount - fee
CASH_OUTFLOW_TYPES = frozenset({
    TransactionType.BUY,
    TransactionType.EXPENSE,
    TransactionType.TRANSFER_OUT,
    TransactionType.REPAY_BORROW,
    TransactionType.FEE,
    TransactionType.INTEREST_EXPENSE,
})
CASH_INFLOW_TYPES = frozenset({
    TransactionType.SELL,
    TransactionType.INCOME,
    TransactionType.TRANSFER_IN,
    TransactionType.INTEREST,
})

FINANCING_TYPES = frozenset({
    TransactionType.BORROW,
    TransactionType.REPAY_BORROW,
    TransactionType.INTEREST_EXPENSE,
})


class DerivedFields(NamedTuple):
    delta_qty: Decimal
    cash_flow_usd: Decimal
    cash_flow_vnd: Decimal


def validate_transaction(tx: Transaction) -> None:
    """Raise ValidationError for input that must never reach the ledger."""
    if tx.date is None:
        raise ValidationError("Transaction date is required")
    if tx.txn_type is None:
        raise ValidationError("Transaction type is required")
    label = tx.txn_type.value
    if not tx.asset:
        raise ValidationError(f"{label} requires an asset")
    if not tx.account:
        raise ValidationError(f"{label} requires an account")
    if not tx.local_currency:
        raise ValidationError(f"{label} requires a local_currency")
    if tx.quantity is None or tx.quantity == ZERO:
        raise ValidationError(f"{label} requires a non-zero quantity")
    if tx.quantity < ZERO:
        raise ValidationError(f"{label} quantity must be positive, got {tx.quantity}")
    if tx.price_local is None:
        raise ValidationError(f"{label} requires price_local")
    if tx.price_local < ZERO:
        raise ValidationError(f"{label} price_local cannot be negative")
    if tx.fee_usd < ZERO or tx.fee_vnd < ZERO:
        raise ValidationError("Fees cannot be negative")
    if tx.borrow_apr is not None and tx.borrow_apr < ZERO:
        raise ValidationError("borrow_apr cannot be negative")
    if tx.borrow_term_days is not None and tx.borrow_term_days < 0:
        raise ValidationError("borrow_term_days cannot be negative")
    if tx.rate_to_usd is None:
        raise ValidationError(f"fx_to_usd is required for {tx.local_currency} transactions")
    if tx.rate_to_vnd is None:
        raise ValidationError(f"fx_to_vnd is required for {tx.local_currency} transactions")


def is_credit_expense(tx: Transaction, credit_accounts: Iterable[str]) -> bool:
    """Expense charged to a credit-style account: no cash moves yet."""
    return tx.txn_type == TransactionType.EXPENSE and tx.account in credit_accounts


def derive(
    tx: Transaction,
    credit_accounts: Iterable[str] = DEFAULT_CREDIT_ACCOUNTS,
) -> DerivedFields:
    """Compute (delta_qty, cash_flow_usd, cash_flow_vnd) for a transaction."""
    validate_transaction(tx)

    if tx.txn_type in INCREASING_TYPES:
        delta = tx.quantity
    else:
        delta = -tx.quantity

    if tx.internal_flow or is_credit_expense(tx, frozenset(credit_accounts)):
        return DerivedFields(delta, ZERO, ZERO)

    amount_usd = tx.amount_usd
    amount_vnd = tx.amount_vnd
    if tx.txn_type in CASH_OUTFLOW_TYPES:
        return DerivedFields(delta, -(amount_usd + tx.fee_usd), -(amount_vnd + tx.fee_vnd))
    if tx.txn_type in CASH_INFLOW_TYPES:
        return DerivedFields(delta, amount_usd - tx.fee_usd, amount_vnd - tx.fee_vnd)
    # stake / unstake move capital into or out of a position; borrow is
    # principal owed, reported as financing by the cash-flow aggregator
    return DerivedFields(delta, ZERO, ZERO)


def with_derived_fields(
    tx: Transaction,
    credit_accounts: Iterable[str] = DEFAULT_CREDIT_ACCOUNTS,
) -> Transaction:
    """Return a copy of tx with delta and cash-flow fields populated."""
    fields = derive(tx, credit_accounts)
    return dataclasses.replace(
        tx,
        delta_qty=fields.delta_qty,
        cash_flow_usd=fields.cash_flow_usd,
        cash_flow_vnd=fields.cash_flow_vnd,
    )


def ensure_derived(
    transactions: Iterable[Transaction],
    credit_accounts: Optional[Iterable[str]] = None,
) -> list[Transaction]:
    """Derive any transaction whose derived fields are still missing."""
    accounts = DEFAULT_CREDIT_ACCOUNTS if credit_accounts is None else frozenset(credit_accounts)
    return [tx if tx.is_derived else with_derived_fields(tx, accounts) for tx in transactions]


def is_financing(tx: Transaction) -> bool:
    return tx.txn_type in FINANCING_TYPES
