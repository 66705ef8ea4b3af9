"""FIFO lot ledger for stake positions."""

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Hashable, Iterable, Iterator, Optional

from finledger.core.exceptions import (
    InsufficientLotsError,
    PositionNotFoundError,
    ValidationError,
)
from finledger.domain.models import (
    CostLot,
    InvestmentPosition,
    PositionKey,
    Transaction,
    TransactionType,
)
from finledger.domain.views import (
    AssetPnL,
    InvestmentSummary,
    Period,
    PnLReport,
    RealizedEntry,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class PositionLockRegistry:
    """
    Lazily created locks keyed by investment id or position key.

    Locks are re-entrant so a caller already holding a position's lock can
    call into code that takes it again on the same thread.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}

    def get(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def lock(self, key: Hashable) -> Iterator[None]:
        lock = self.get(key)
        with lock:
            yield


_position_locks = PositionLockRegistry()


def get_position_locks() -> PositionLockRegistry:
    """Return the process-wide registry shared by all action handlers."""
    return _position_locks


@dataclass
class DepositEntry:
    investment_id: str
    asset: str
    date: date
    quantity: Decimal
    unit_cost_usd: Decimal

    @property
    def cost_usd(self) -> Decimal:
        return self.quantity * self.unit_cost_usd


class LotLedger:
    """
    Per-position FIFO queues of open cost lots.

    Deposits append a lot to the tail of the position's queue; withdrawals
    consume from the head. A position closes once its lots are exhausted
    (or on an explicit close_all) and never reopens: the next deposit for
    the same (asset, account, horizon) starts a new position.

    Events on one key must arrive in date order, the order replay applies
    them in. An event dated before the key's latest event is rejected.
    """

    def __init__(self, locks: Optional[PositionLockRegistry] = None):
        self._locks = locks or PositionLockRegistry()
        self._index_lock = threading.Lock()
        self._positions: dict[str, InvestmentPosition] = {}
        self._open_by_key: dict[PositionKey, str] = {}
        self._last_event_by_key: dict[PositionKey, date] = {}
        self._deposits: list[DepositEntry] = []
        self._realized: list[RealizedEntry] = []

    @classmethod
    def from_transactions(
        cls,
        transactions: Iterable[Transaction],
        locks: Optional[PositionLockRegistry] = None,
    ) -> "LotLedger":
        """
        Rebuild ledger state by replaying stake and unstake transactions.

        Ordering is by date; same-day events keep their input order.
        """
        ledger = cls(locks=locks)
        events = [
            tx for tx in transactions
            if tx.txn_type in (TransactionType.STAKE, TransactionType.UNSTAKE)
        ]
        events.sort(key=lambda tx: tx.date)
        for tx in events:
            if tx.txn_type == TransactionType.STAKE:
                ledger.deposit(
                    PositionKey(tx.asset, tx.investment_account or tx.account, tx.horizon),
                    tx.date,
                    tx.quantity,
                    tx.unit_price_usd,
                    investment_id=tx.investment_id,
                )
            else:
                if not tx.investment_id:
                    raise PositionNotFoundError(f"<unlinked unstake {tx.txn_id}>")
                ledger.withdraw(
                    tx.investment_id,
                    tx.date,
                    tx.quantity,
                    tx.unit_price_usd,
                    close_all=tx.close_all,
                )
        logger.debug(
            "Replayed %d stake/unstake events into %d positions",
            len(events),
            len(ledger._positions),
        )
        return ledger

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_position(self, investment_id: str) -> InvestmentPosition:
        position = self._positions.get(investment_id)
        if position is None:
            raise PositionNotFoundError(investment_id)
        return position

    def find_open_position(self, key: PositionKey) -> Optional[InvestmentPosition]:
        with self._index_lock:
            investment_id = self._open_by_key.get(key)
        return self._positions[investment_id] if investment_id else None

    def positions(self, is_open: Optional[bool] = None) -> list[InvestmentPosition]:
        result = list(self._positions.values())
        if is_open is not None:
            result = [p for p in result if p.is_open == is_open]
        return sorted(result, key=lambda p: p.opened_at)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def deposit(
        self,
        key: PositionKey,
        on: date,
        quantity: Decimal,
        unit_cost_usd: Decimal,
        investment_id: Optional[str] = None,
    ) -> InvestmentPosition:
        """Append a cost lot, creating the position for key if none is open."""
        if quantity is None or quantity <= ZERO:
            raise ValidationError(f"Deposit quantity must be positive, got {quantity}")
        if unit_cost_usd is None or unit_cost_usd < ZERO:
            raise ValidationError("Deposit unit cost cannot be negative")

        position = self._resolve_for_deposit(key, on, investment_id)
        with self._locks.lock(position.investment_id):
            if not position.is_open:
                raise PositionNotFoundError(position.investment_id, closed=True)
            position.lots.append(CostLot(quantity, unit_cost_usd, on))
            position.deposit_qty += quantity
            position.deposit_cost_usd += quantity * unit_cost_usd
            self._deposits.append(
                DepositEntry(position.investment_id, position.asset, on, quantity, unit_cost_usd)
            )
            self._mark_event(key, on)
        return position

    def withdraw(
        self,
        investment_id: str,
        on: date,
        quantity: Optional[Decimal],
        unit_price_usd: Decimal,
        close_all: bool = False,
    ) -> RealizedEntry:
        """
        Consume lots oldest-first and realize PnL on the withdrawal date.

        quantity is what leaves the position at unit_price_usd. With
        close_all every remaining lot is consumed regardless, so a quantity
        below the remaining balance realizes the shortfall as a loss; a
        missing quantity means the full remaining balance.
        """
        if unit_price_usd is None or unit_price_usd < ZERO:
            raise ValidationError("Withdrawal unit price cannot be negative")
        if quantity is None and not close_all:
            raise ValidationError("Withdrawal quantity is required unless closing")
        if quantity is not None and (quantity < ZERO or (quantity == ZERO and not close_all)):
            raise ValidationError(f"Withdrawal quantity must be positive, got {quantity}")

        position = self.get_position(investment_id)
        with self._locks.lock(investment_id):
            if not position.is_open:
                raise PositionNotFoundError(investment_id, closed=True)
            self._check_chronology(position.key, on, "withdrawal")

            available = position.quantity_remaining
            requested = available if quantity is None else quantity
            if requested > available:
                raise InsufficientLotsError(investment_id, requested, available)

            to_consume = available if close_all else requested
            cost_consumed = self._consume(position, to_consume)

            proceeds = requested * unit_price_usd
            entry = RealizedEntry(
                investment_id=investment_id,
                asset=position.asset,
                account=position.account,
                date=on,
                quantity=requested,
                proceeds_usd=proceeds,
                cost_basis_usd=cost_consumed,
            )
            position.withdrawal_qty += requested
            position.withdrawal_value_usd += proceeds
            position.realized_pnl_usd += entry.realized_pnl_usd

            if close_all or not position.lots:
                self._close(position, on)
                entry.closed_position = True
            self._realized.append(entry)
            self._mark_event(position.key, on)
        return entry

    def last_event_on(self, key: PositionKey) -> Optional[date]:
        """Date of the latest deposit or withdrawal on key, closed positions included."""
        with self._index_lock:
            return self._last_event_by_key.get(key)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def get_pnl(self, period: Period) -> PnLReport:
        """
        Realized PnL of withdrawals dated in period.

        ROI is measured against deposits dated in the same period only, even
        though the lots consumed may have been opened earlier.
        """
        by_asset: dict[str, AssetPnL] = {}
        entries = [e for e in self._realized if period.contains(e.date)]
        realized = ZERO
        for entry in entries:
            realized += entry.realized_pnl_usd
            bucket = by_asset.setdefault(entry.asset, AssetPnL(asset=entry.asset))
            bucket.realized_pnl_usd += entry.realized_pnl_usd
            bucket.proceeds_usd += entry.proceeds_usd

        deposit_cost = ZERO
        for deposit in self._deposits:
            if period.contains(deposit.date):
                deposit_cost += deposit.cost_usd
                bucket = by_asset.setdefault(deposit.asset, AssetPnL(asset=deposit.asset))
                bucket.deposit_cost_usd += deposit.cost_usd

        roi = ZERO
        if deposit_cost != ZERO:
            roi = realized / deposit_cost * Decimal("100")

        return PnLReport(
            period=period,
            realized_pnl_usd=realized,
            deposit_cost_usd=deposit_cost,
            roi_percent=roi,
            by_asset=dict(sorted(by_asset.items())),
            entries=entries,
        )

    def summary(self) -> InvestmentSummary:
        summary = InvestmentSummary()
        for position in self._positions.values():
            summary.total_positions += 1
            if position.is_open:
                summary.open_positions += 1
            else:
                summary.closed_positions += 1
            summary.total_deposit_cost_usd += position.deposit_cost_usd
            summary.total_withdrawal_value_usd += position.withdrawal_value_usd
            summary.realized_pnl_usd += position.realized_pnl_usd
        if summary.total_deposit_cost_usd != ZERO:
            summary.roi_percent = (
                summary.realized_pnl_usd / summary.total_deposit_cost_usd * Decimal("100")
            )
        return summary

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _resolve_for_deposit(
        self,
        key: PositionKey,
        on: date,
        investment_id: Optional[str],
    ) -> InvestmentPosition:
        self._check_chronology(key, on, "deposit")
        with self._index_lock:
            open_id = self._open_by_key.get(key)
            if investment_id is None:
                investment_id = open_id or str(uuid.uuid4())

            position = self._positions.get(investment_id)
            if position is not None:
                if not position.is_open:
                    raise PositionNotFoundError(investment_id, closed=True)
                if position.key != key:
                    raise ValidationError(
                        f"Position {investment_id} belongs to {position.key}, not {key}"
                    )
                return position

            if open_id is not None:
                raise ValidationError(
                    f"{key} already has open position {open_id}; "
                    f"cannot open {investment_id}"
                )
            position = InvestmentPosition(
                investment_id=investment_id,
                asset=key.asset,
                account=key.account,
                horizon=key.horizon,
                opened_at=on,
            )
            self._positions[investment_id] = position
            self._open_by_key[key] = investment_id
            return position

    @staticmethod
    def _consume(position: InvestmentPosition, quantity: Decimal) -> Decimal:
        """Pop quantity from the head of the lot queue; return its cost."""
        needed = quantity
        cost = ZERO
        lots = position.lots
        while needed > ZERO and lots:
            lot = lots[0]
            take = min(lot.quantity_remaining, needed)
            cost += take * lot.unit_cost_usd
            lot.quantity_remaining -= take
            needed -= take
            if lot.quantity_remaining == ZERO:
                lots.popleft()
        return cost

    def _check_chronology(self, key: PositionKey, on: date, event: str) -> None:
        last = self.last_event_on(key)
        if last is not None and on < last:
            raise ValidationError(
                f"Cannot record a {event} on {on} for {key}: it already has events up to {last}"
            )

    def _mark_event(self, key: PositionKey, on: date) -> None:
        with self._index_lock:
            last = self._last_event_by_key.get(key)
            if last is None or on > last:
                self._last_event_by_key[key] = on

    def _close(self, position: InvestmentPosition, on: date) -> None:
        position.lots.clear()
        position.is_open = False
        position.closed_at = on
        with self._index_lock:
            if self._open_by_key.get(position.key) == position.investment_id:
                del self._open_by_key[position.key]
