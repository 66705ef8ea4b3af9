"""Reporting facade: runs the aggregators over the transaction store."""

import logging
from datetime import date
from typing import Optional

from finledger.config.settings import Settings, get_settings
from finledger.domain.models import InvestmentPosition, TransactionType
from finledger.domain.views import (
    CashFlowReport,
    HoldingsSnapshot,
    HoldingsView,
    InvestmentSummary,
    OutflowProjection,
    OutstandingBorrow,
    Period,
    PnLReport,
    SpendingReport,
)
from finledger.repositories.protocols import TransactionFilter, TransactionRepository
from finledger.services.borrow_projector import BorrowProjector
from finledger.services.cashflow_aggregator import CashFlowAggregator
from finledger.services.holdings_aggregator import HoldingsAggregator
from finledger.services.lot_ledger import LotLedger
from finledger.services.price_service import PriceService
from finledger.services.spending_aggregator import SpendingAggregator

logger = logging.getLogger(__name__)

BORROW_TYPES = [TransactionType.BORROW, TransactionType.REPAY_BORROW]
POSITION_TYPES = [TransactionType.STAKE, TransactionType.UNSTAKE]


class ReportingService:
    """
    Service assembling reports for a period or as-of date.

    Each call queries a fresh snapshot of the store and builds new report
    objects; nothing is cached between calls.
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        price_service: PriceService,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self._transaction_repo = transaction_repo
        self._holdings = HoldingsAggregator(price_service, settings.credit_accounts)
        self._spending = SpendingAggregator(settings.top_expenses_limit, settings.credit_accounts)
        self._cash_flow = CashFlowAggregator(settings.credit_accounts)
        self._borrows = BorrowProjector(settings.days_in_year)

    def get_holdings(self, as_of: date, strict: bool = False) -> HoldingsView:
        transactions = self._transaction_repo.query(TransactionFilter(end_date=as_of))
        logger.debug("Holdings as of %s over %d transactions", as_of, len(transactions))
        return self._holdings.get_holdings(transactions, as_of, strict=strict)

    def get_holdings_by_asset(self, as_of: date, strict: bool = False) -> dict[str, HoldingsSnapshot]:
        transactions = self._transaction_repo.query(TransactionFilter(end_date=as_of))
        return self._holdings.get_holdings_by_asset(transactions, as_of, strict=strict)

    def get_spending(self, period: Period, top_limit: Optional[int] = None) -> SpendingReport:
        transactions = self._transaction_repo.query(
            TransactionFilter(
                start_date=period.start_date,
                end_date=period.end_date,
                txn_types=[TransactionType.EXPENSE],
            )
        )
        logger.debug("Spending for %s..%s", period.start_date, period.end_date)
        return self._spending.aggregate(transactions, period, top_limit=top_limit)

    def get_cash_flow(self, period: Period) -> CashFlowReport:
        transactions = self._transaction_repo.query(
            TransactionFilter(start_date=period.start_date, end_date=period.end_date)
        )
        logger.debug("Cash flow for %s..%s", period.start_date, period.end_date)
        return self._cash_flow.aggregate(transactions, period)

    def get_pnl(self, period: Period) -> PnLReport:
        # Lots opened before the period still supply cost basis, so replay
        # everything up to the period end.
        ledger = self._ledger(end_date=period.end_date)
        return ledger.get_pnl(period)

    def get_expected_borrow_outflows(self, as_of: date) -> list[OutflowProjection]:
        transactions = self._transaction_repo.query(
            TransactionFilter(end_date=as_of, txn_types=BORROW_TYPES)
        )
        return self._borrows.project(transactions, as_of)

    def get_outstanding_borrows(self, as_of: date) -> list[OutstandingBorrow]:
        transactions = self._transaction_repo.query(
            TransactionFilter(end_date=as_of, txn_types=BORROW_TYPES)
        )
        return self._borrows.outstanding(transactions, as_of)

    def list_investments(self, is_open: Optional[bool] = None) -> list[InvestmentPosition]:
        return self._ledger().positions(is_open=is_open)

    def get_investment_summary(self) -> InvestmentSummary:
        return self._ledger().summary()

    def _ledger(self, end_date: Optional[date] = None) -> LotLedger:
        transactions = self._transaction_repo.query(
            TransactionFilter(end_date=end_date, txn_types=POSITION_TYPES)
        )
        return LotLedger.from_transactions(transactions)
