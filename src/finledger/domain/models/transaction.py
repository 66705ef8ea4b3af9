"""Transaction domain model."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from finledger.domain.models.enums import TransactionType


@dataclass
class Transaction:
    """
    Ledger transaction entry (source of truth).

    quantity is stored as a positive magnitude; the direction of the change
    to holdings lives in delta_qty, which together with the cash-flow fields
    is filled in by the derivation rules and never supplied by callers.

    fx_to_usd / fx_to_vnd may be left unset when local_currency already is
    the target currency.
    """

    txn_id: str
    date: Optional[date]
    txn_type: Optional[TransactionType]
    asset: str
    account: str
    quantity: Optional[Decimal]
    price_local: Optional[Decimal]
    local_currency: str = "USD"
    fx_to_usd: Optional[Decimal] = None
    fx_to_vnd: Optional[Decimal] = None
    fee_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    fee_vnd: Decimal = field(default_factory=lambda: Decimal("0"))
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
    delta_qty: Optional[Decimal] = None
    cash_flow_usd: Optional[Decimal] = None
    cash_flow_vnd: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if isinstance(self.txn_type, str):
            self.txn_type = TransactionType(self.txn_type)

    @property
    def is_derived(self) -> bool:
        """Return True once delta and cash-flow fields are populated."""
        return (
            self.delta_qty is not None
            and self.cash_flow_usd is not None
            and self.cash_flow_vnd is not None
        )

    @property
    def rate_to_usd(self) -> Optional[Decimal]:
        if self.fx_to_usd is not None:
            return self.fx_to_usd
        if self.local_currency == "USD":
            return Decimal("1")
        return None

    @property
    def rate_to_vnd(self) -> Optional[Decimal]:
        if self.fx_to_vnd is not None:
            return self.fx_to_vnd
        if self.local_currency == "VND":
            return Decimal("1")
        return None

    @property
    def amount_local(self) -> Decimal:
        """Gross value in the local currency, fees excluded."""
        return (self.quantity or Decimal("0")) * (self.price_local or Decimal("0"))

    @property
    def amount_usd(self) -> Decimal:
        """Gross value in USD, fees excluded."""
        return self.amount_local * (self.rate_to_usd or Decimal("0"))

    @property
    def amount_vnd(self) -> Decimal:
        """Gross value in VND, fees excluded."""
        return self.amount_local * (self.rate_to_vnd or Decimal("0"))

    @property
    def unit_price_usd(self) -> Decimal:
        return (self.price_local or Decimal("0")) * (self.rate_to_usd or Decimal("0"))
