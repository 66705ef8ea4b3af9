"""Spending aggregator: realized expenses by tag and counterparty."""

from decimal import Decimal
from typing import Iterable, Optional

from finledger.domain.models import Transaction, TransactionType
from finledger.domain.views import ExpenseItem, Period, SpendingGroup, SpendingReport
from finledger.services.derivation import ensure_derived

ZERO = Decimal("0")
HUNDRED = Decimal("100")

UNTAGGED = "Untagged"
UNKNOWN_COUNTERPARTY = "Unknown"


class SpendingAggregator:
    """
    Buckets cash expenses within a period.

    Internal flows and expenses without cash movement (deferred credit
    card spend) are left out of realized spending.
    """

    def __init__(
        self,
        top_expenses_limit: Optional[int] = 10,
        credit_accounts: Optional[Iterable[str]] = None,
    ):
        self._top_expenses_limit = top_expenses_limit
        self._credit_accounts = credit_accounts

    def aggregate(
        self,
        transactions: Iterable[Transaction],
        period: Period,
        top_limit: Optional[int] = None,
    ) -> SpendingReport:
        report = SpendingReport(period=period)
        expenses = [
            tx for tx in ensure_derived(transactions, self._credit_accounts)
            if self._is_realized_expense(tx, period)
        ]

        for tx in expenses:
            report.total_usd += tx.amount_usd
            report.total_vnd += tx.amount_vnd
            self._add(report.by_tag, tx.tag or UNTAGGED, tx)
            self._add(report.by_counterparty, tx.counterparty or UNKNOWN_COUNTERPARTY, tx)

        for group in list(report.by_tag.values()) + list(report.by_counterparty.values()):
            if report.total_usd != ZERO:
                group.percentage = group.amount_usd / report.total_usd * HUNDRED

        report.by_tag = self._ranked(report.by_tag)
        report.by_counterparty = self._ranked(report.by_counterparty)

        # sorted() is stable: equal amounts keep date/insertion order
        ranked = sorted(expenses, key=lambda tx: tx.amount_usd, reverse=True)
        limit = top_limit if top_limit is not None else self._top_expenses_limit
        if limit is not None:
            ranked = ranked[:limit]
        report.top_expenses = [self._to_item(tx) for tx in ranked]
        return report

    @staticmethod
    def _is_realized_expense(tx: Transaction, period: Period) -> bool:
        return (
            tx.txn_type == TransactionType.EXPENSE
            and period.contains(tx.date)
            and not tx.internal_flow
            and tx.cash_flow_usd != ZERO
        )

    @staticmethod
    def _add(groups: dict[str, SpendingGroup], key: str, tx: Transaction) -> None:
        group = groups.get(key)
        if group is None:
            group = SpendingGroup(key=key, amount_usd=ZERO, amount_vnd=ZERO, count=0, percentage=ZERO)
            groups[key] = group
        group.amount_usd += tx.amount_usd
        group.amount_vnd += tx.amount_vnd
        group.count += 1

    @staticmethod
    def _ranked(groups: dict[str, SpendingGroup]) -> dict[str, SpendingGroup]:
        return dict(sorted(groups.items(), key=lambda kv: (-kv[1].amount_usd, kv[0])))

    @staticmethod
    def _to_item(tx: Transaction) -> ExpenseItem:
        return ExpenseItem(
            txn_id=tx.txn_id,
            date=tx.date,
            account=tx.account,
            asset=tx.asset,
            amount_usd=tx.amount_usd,
            amount_vnd=tx.amount_vnd,
            tag=tx.tag,
            counterparty=tx.counterparty,
            note=tx.note,
        )
