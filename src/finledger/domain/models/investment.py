"""Investment position and cost lot domain models."""

from collections import deque
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import NamedTuple, Optional

from finledger.domain.models.enums import PositionStatus


class PositionKey(NamedTuple):
    """Identity of a stake position: positions never merge across horizons."""

    asset: str
    account: str
    horizon: Optional[str] = None


@dataclass
class CostLot:
    """One FIFO entry: quantity acquired at a fixed USD unit cost."""

    quantity_remaining: Decimal
    unit_cost_usd: Decimal
    opened_at: date
    quantity_deposited: Decimal = field(default_factory=lambda: Decimal("0"))

    def __post_init__(self) -> None:
        if self.quantity_deposited == Decimal("0"):
            self.quantity_deposited = self.quantity_remaining


@dataclass
class InvestmentPosition:
    """
    Open or closed stake position owned by the lot ledger.

    Lots are kept in creation order; consumption always starts at the head.
    """

    investment_id: str
    asset: str
    account: str
    horizon: Optional[str]
    opened_at: date
    deposit_qty: Decimal = field(default_factory=lambda: Decimal("0"))
    deposit_cost_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    withdrawal_qty: Decimal = field(default_factory=lambda: Decimal("0"))
    withdrawal_value_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    realized_pnl_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    is_open: bool = True
    closed_at: Optional[date] = None
    lots: deque = field(default_factory=deque)

    @property
    def key(self) -> PositionKey:
        return PositionKey(self.asset, self.account, self.horizon)

    @property
    def status(self) -> PositionStatus:
        return PositionStatus.OPEN if self.is_open else PositionStatus.CLOSED

    @property
    def quantity_remaining(self) -> Decimal:
        return sum((lot.quantity_remaining for lot in self.lots), Decimal("0"))

    @property
    def cost_remaining_usd(self) -> Decimal:
        return sum(
            (lot.quantity_remaining * lot.unit_cost_usd for lot in self.lots),
            Decimal("0"),
        )

    @property
    def average_unit_cost_usd(self) -> Optional[Decimal]:
        """Weighted unit cost of what is still held; None once empty."""
        remaining = self.quantity_remaining
        if remaining == Decimal("0"):
            return None
        return self.cost_remaining_usd / remaining

    @property
    def pnl_percent(self) -> Decimal:
        if self.deposit_cost_usd == Decimal("0"):
            return Decimal("0")
        return self.realized_pnl_usd / self.deposit_cost_usd * Decimal("100")
