"""Borrow outflow projector: principal still owed plus simple interest to term."""

from collections import deque
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from finledger.domain.models import Transaction, TransactionType
from finledger.domain.views import OutflowProjection, OutstandingBorrow

ZERO = Decimal("0")


@dataclass
class _OpenBorrow:
    tx: Transaction
    remaining: Decimal

    @property
    def projectable(self) -> bool:
        return bool(self.tx.borrow_apr) and bool(self.tx.borrow_term_days)

    @property
    def term_end(self) -> date:
        return self.tx.date + timedelta(days=self.tx.borrow_term_days)


class BorrowProjector:
    """
    Projects the outflow needed to settle open borrows.

    Repayments on an (account, asset) pay down its borrows oldest-first.
    Interest is simple, on a fixed day-count year, over the days left until
    each borrow's term ends; a borrow past its term accrues nothing more.
    """

    def __init__(self, days_in_year: int = 365):
        self._days_in_year = Decimal(days_in_year)

    def project(self, transactions: Iterable[Transaction], as_of: date) -> list[OutflowProjection]:
        result = []
        for (account, asset), open_borrows in self._open_borrows(transactions, as_of).items():
            projectable = [b for b in open_borrows if b.projectable]
            if not projectable:
                continue
            principal = ZERO
            interest = ZERO
            for borrow in projectable:
                principal += borrow.remaining
                interest += self._interest(borrow, as_of)
            result.append(
                OutflowProjection(
                    account=account,
                    asset=asset,
                    as_of=as_of,
                    remaining_principal=principal,
                    interest_accrued=interest,
                    borrow_ids=[b.tx.txn_id for b in projectable],
                )
            )
        return result

    def outstanding(self, transactions: Iterable[Transaction], as_of: date) -> list[OutstandingBorrow]:
        """Borrowed minus repaid per (account, asset); positive balances only."""
        totals: dict[tuple[str, str], OutstandingBorrow] = {}
        for tx in transactions:
            if tx.date > as_of or tx.txn_type not in (
                TransactionType.BORROW,
                TransactionType.REPAY_BORROW,
            ):
                continue
            key = (tx.account, tx.asset)
            entry = totals.setdefault(key, OutstandingBorrow(tx.account, tx.asset, ZERO, ZERO))
            if tx.txn_type == TransactionType.BORROW:
                entry.borrowed += tx.quantity
            else:
                entry.repaid += tx.quantity
        return [
            entry for _, entry in sorted(totals.items())
            if entry.outstanding > ZERO
        ]

    def _interest(self, borrow: _OpenBorrow, as_of: date) -> Decimal:
        days = max(0, (borrow.term_end - as_of).days)
        if days == 0:
            return ZERO
        return borrow.remaining * borrow.tx.borrow_apr * Decimal(days) / self._days_in_year

    @staticmethod
    def _open_borrows(
        transactions: Iterable[Transaction],
        as_of: date,
    ) -> dict[tuple[str, str], list[_OpenBorrow]]:
        queues: dict[tuple[str, str], deque] = {}
        repaid: dict[tuple[str, str], Decimal] = {}
        relevant = sorted(
            (tx for tx in transactions if tx.date <= as_of),
            key=lambda tx: tx.date,
        )
        for tx in relevant:
            key = (tx.account, tx.asset)
            if tx.txn_type == TransactionType.BORROW:
                queues.setdefault(key, deque()).append(_OpenBorrow(tx, tx.quantity))
            elif tx.txn_type == TransactionType.REPAY_BORROW:
                repaid[key] = repaid.get(key, ZERO) + tx.quantity

        result: dict[tuple[str, str], list[_OpenBorrow]] = {}
        for key in sorted(queues):
            queue = queues[key]
            left = repaid.get(key, ZERO)
            while left > ZERO and queue:
                head = queue[0]
                paid = min(head.remaining, left)
                head.remaining -= paid
                left -= paid
                if head.remaining == ZERO:
                    queue.popleft()
            if queue:
                result[key] = list(queue)
        return result

