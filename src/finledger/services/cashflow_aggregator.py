"""Cash-flow aggregator."""

from typing import Iterable, Optional

from finledger.domain.models import Transaction, TransactionType
from finledger.domain.views import CashFlowBucket, CashFlowReport, Period
from finledger.services.derivation import ensure_derived, is_financing
from finledger.services.spending_aggregator import UNTAGGED


class CashFlowAggregator:
    """
    Sums derived cash flows of non-internal transactions in a period.

    Borrowed principal carries no derived cash flow, so it only shows up
    as a financing inflow, counted at its gross amount.
    """

    def __init__(self, credit_accounts: Optional[Iterable[str]] = None):
        self._credit_accounts = credit_accounts

    def aggregate(self, transactions: Iterable[Transaction], period: Period) -> CashFlowReport:
        report = CashFlowReport(period=period)
        for tx in ensure_derived(transactions, self._credit_accounts):
            if tx.internal_flow or not period.contains(tx.date):
                continue
            flow_usd, flow_vnd = tx.cash_flow_usd, tx.cash_flow_vnd

            report.totals.add(flow_usd, flow_vnd)
            report.by_type.setdefault(tx.txn_type.value, CashFlowBucket()).add(flow_usd, flow_vnd)
            report.by_tag.setdefault(tx.tag or UNTAGGED, CashFlowBucket()).add(flow_usd, flow_vnd)
            if tx.txn_type == TransactionType.BORROW:
                report.financing.add(tx.amount_usd, tx.amount_vnd)
            elif is_financing(tx):
                report.financing.add(flow_usd, flow_vnd)
            else:
                report.operating.add(flow_usd, flow_vnd)
        return report
