"""Ledger service: validated, append-only access to the transaction store."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from finledger.core.exceptions import NotFoundError, ValidationError
from finledger.core.timezone import now_local, to_ledger_date
from finledger.domain.models import Transaction, TransactionType
from finledger.repositories.protocols import TransactionFilter, TransactionRepository
from finledger.services.derivation import DEFAULT_CREDIT_ACCOUNTS, with_derived_fields

logger = logging.getLogger(__name__)

ACTION_ONLY_TYPES = frozenset({TransactionType.STAKE, TransactionType.UNSTAKE})


@dataclass
class TransactionCreate:
    """Input data for creating a transaction."""

    txn_type: Optional[TransactionType]
    asset: str
    account: str
    quantity: Optional[Decimal]
    price_local: Optional[Decimal]
    date: Optional[date] = None
    local_currency: str = "USD"
    fx_to_usd: Optional[Decimal] = None
    fx_to_vnd: Optional[Decimal] = None
    fee_usd: Decimal = Decimal("0")
    fee_vnd: Decimal = Decimal("0")
    counterparty: Optional[str] = None
    tag: Optional[str] = None
    note: Optional[str] = None
    internal_flow: bool = False
    borrow_apr: Optional[Decimal] = None
    borrow_term_days: Optional[int] = None
    investment_id: Optional[str] = None
    investment_account: Optional[str] = None
    horizon: Optional[str] = None
    close_all: bool = False


def build_transaction(data: TransactionCreate) -> Transaction:
    """Turn create input into an underived Transaction with a fresh id."""
    return Transaction(
        txn_id=str(uuid.uuid4()),
        date=to_ledger_date(data.date) if data.date else None,
        txn_type=data.txn_type,
        asset=data.asset.upper() if data.asset else data.asset,
        account=data.account,
        quantity=data.quantity,
        price_local=data.price_local,
        local_currency=(data.local_currency or "").upper(),
        fx_to_usd=data.fx_to_usd,
        fx_to_vnd=data.fx_to_vnd,
        fee_usd=data.fee_usd,
        fee_vnd=data.fee_vnd,
        counterparty=data.counterparty,
        tag=data.tag,
        note=data.note,
        internal_flow=data.internal_flow,
        borrow_apr=data.borrow_apr,
        borrow_term_days=data.borrow_term_days,
        investment_id=data.investment_id,
        investment_account=data.investment_account,
        horizon=data.horizon,
        close_all=data.close_all,
        created_at=now_local(),
    )


class LedgerService:
    """
    Service for the transaction ledger.

    Every transaction is validated and derived before it is stored, so
    readers always see delta_qty and cash flows populated. Stored
    transactions are never edited.
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        credit_accounts: Optional[Iterable[str]] = None,
    ):
        self._transaction_repo = transaction_repo
        self._credit_accounts = frozenset(
            DEFAULT_CREDIT_ACCOUNTS if credit_accounts is None else credit_accounts
        )

    @property
    def credit_accounts(self) -> frozenset:
        return self._credit_accounts

    def prepare(self, data: TransactionCreate) -> Transaction:
        """Validate and derive without persisting."""
        return with_derived_fields(build_transaction(data), self._credit_accounts)

    def create_transaction(self, data: TransactionCreate) -> Transaction:
        """
        Add a new transaction to the ledger.

        Stake and unstake legs are only written by the action layer, which
        keeps them paired with the lot ledger.
        """
        if data.txn_type in ACTION_ONLY_TYPES:
            raise ValidationError(
                f"{data.txn_type.value} transactions must be recorded through the stake/unstake actions"
            )
        transaction = self.prepare(data)
        created = self._transaction_repo.create(transaction)
        logger.debug(
            "Recorded %s %s %s in %s",
            created.txn_type.value,
            created.quantity,
            created.asset,
            created.account,
        )
        return created

    def get_transaction(self, txn_id: str) -> Transaction:
        """Get transaction by ID."""
        transaction = self._transaction_repo.get_by_id(txn_id)
        if not transaction:
            raise NotFoundError("Transaction", txn_id)
        return transaction

    def query_transactions(self, txn_filter: Optional[TransactionFilter] = None) -> list[Transaction]:
        """Query transactions with filters."""
        return self._transaction_repo.query(txn_filter)
