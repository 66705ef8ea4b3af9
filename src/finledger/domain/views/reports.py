"""View models for report outputs. Built fresh per query, never persisted."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from finledger.core.exceptions import ValidationError


@dataclass(frozen=True)
class Period:
    """Reporting window with inclusive bounds."""

    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.start_date > self.end_date:
            raise ValidationError(
                f"Period start {self.start_date} is after end {self.end_date}"
            )

    def contains(self, on: date) -> bool:
        return self.start_date <= on <= self.end_date


# -----------------------------------------------------------------------------
# Holdings
# -----------------------------------------------------------------------------


@dataclass
class HoldingsSnapshot:
    """Net quantity of one asset (optionally per account) and its value."""

    asset: str
    quantity: Decimal
    account: Optional[str] = None
    price_usd: Optional[Decimal] = None
    value_usd: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    price_error: Optional[str] = None

    @property
    def is_priced(self) -> bool:
        return self.value_usd is not None


@dataclass
class HoldingsView:
    """Holdings as of a date, including assets whose price failed."""

    as_of: date
    items: list[HoldingsSnapshot] = field(default_factory=list)
    total_value_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    unpriced: list[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Spending
# -----------------------------------------------------------------------------


@dataclass
class SpendingGroup:
    key: str
    amount_usd: Decimal
    amount_vnd: Decimal
    count: int
    percentage: Decimal


@dataclass
class ExpenseItem:
    txn_id: str
    date: date
    account: str
    asset: str
    amount_usd: Decimal
    amount_vnd: Decimal
    tag: Optional[str] = None
    counterparty: Optional[str] = None
    note: Optional[str] = None


@dataclass
class SpendingReport:
    period: Period
    total_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    total_vnd: Decimal = field(default_factory=lambda: Decimal("0"))
    by_tag: dict[str, SpendingGroup] = field(default_factory=dict)
    by_counterparty: dict[str, SpendingGroup] = field(default_factory=dict)
    top_expenses: list[ExpenseItem] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Cash flow
# -----------------------------------------------------------------------------


@dataclass
class CashFlowBucket:
    """Inflow/outflow totals; outflows are reported as positive magnitudes."""

    inflow_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    outflow_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    inflow_vnd: Decimal = field(default_factory=lambda: Decimal("0"))
    outflow_vnd: Decimal = field(default_factory=lambda: Decimal("0"))
    count: int = 0

    @property
    def net_usd(self) -> Decimal:
        return self.inflow_usd - self.outflow_usd

    @property
    def net_vnd(self) -> Decimal:
        return self.inflow_vnd - self.outflow_vnd

    def add(self, cash_flow_usd: Decimal, cash_flow_vnd: Decimal) -> None:
        if cash_flow_usd > 0:
            self.inflow_usd += cash_flow_usd
        elif cash_flow_usd < 0:
            self.outflow_usd += -cash_flow_usd
        if cash_flow_vnd > 0:
            self.inflow_vnd += cash_flow_vnd
        elif cash_flow_vnd < 0:
            self.outflow_vnd += -cash_flow_vnd
        self.count += 1


@dataclass
class CashFlowReport:
    period: Period
    totals: CashFlowBucket = field(default_factory=CashFlowBucket)
    by_type: dict[str, CashFlowBucket] = field(default_factory=dict)
    by_tag: dict[str, CashFlowBucket] = field(default_factory=dict)
    operating: CashFlowBucket = field(default_factory=CashFlowBucket)
    financing: CashFlowBucket = field(default_factory=CashFlowBucket)

    @property
    def total_in_usd(self) -> Decimal:
        return self.totals.inflow_usd

    @property
    def total_out_usd(self) -> Decimal:
        return self.totals.outflow_usd

    @property
    def net_usd(self) -> Decimal:
        return self.totals.net_usd

    @property
    def combined_net_usd(self) -> Decimal:
        return self.operating.net_usd + self.financing.net_usd


# -----------------------------------------------------------------------------
# Realized PnL
# -----------------------------------------------------------------------------


@dataclass
class RealizedEntry:
    """PnL realized by one withdrawal, attributed to the withdrawal date."""

    investment_id: str
    asset: str
    account: str
    date: date
    quantity: Decimal
    proceeds_usd: Decimal
    cost_basis_usd: Decimal
    closed_position: bool = False

    @property
    def realized_pnl_usd(self) -> Decimal:
        return self.proceeds_usd - self.cost_basis_usd


@dataclass
class AssetPnL:
    asset: str
    realized_pnl_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    deposit_cost_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    proceeds_usd: Decimal = field(default_factory=lambda: Decimal("0"))

    @property
    def roi_percent(self) -> Decimal:
        if self.deposit_cost_usd == Decimal("0"):
            return Decimal("0")
        return self.realized_pnl_usd / self.deposit_cost_usd * Decimal("100")


@dataclass
class PnLReport:
    period: Period
    realized_pnl_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    deposit_cost_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    roi_percent: Decimal = field(default_factory=lambda: Decimal("0"))
    by_asset: dict[str, AssetPnL] = field(default_factory=dict)
    entries: list[RealizedEntry] = field(default_factory=list)


@dataclass
class InvestmentSummary:
    total_positions: int = 0
    open_positions: int = 0
    closed_positions: int = 0
    total_deposit_cost_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    total_withdrawal_value_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    realized_pnl_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    roi_percent: Decimal = field(default_factory=lambda: Decimal("0"))


# -----------------------------------------------------------------------------
# Borrows
# -----------------------------------------------------------------------------


@dataclass
class OutflowProjection:
    """Principal still owed on an (account, asset) plus interest to term end."""

    account: str
    asset: str
    as_of: date
    remaining_principal: Decimal
    interest_accrued: Decimal
    borrow_ids: list[str] = field(default_factory=list)

    @property
    def total_outflow(self) -> Decimal:
        return self.remaining_principal + self.interest_accrued


@dataclass
class OutstandingBorrow:
    account: str
    asset: str
    borrowed: Decimal
    repaid: Decimal

    @property
    def outstanding(self) -> Decimal:
        return self.borrowed - self.repaid
