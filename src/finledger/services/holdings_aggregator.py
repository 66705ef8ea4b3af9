"""Holdings aggregator: net quantities as of a date, priced and weighted."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from finledger.core.exceptions import PriceUnavailableError
from finledger.domain.models import Transaction
from finledger.domain.views import HoldingsSnapshot, HoldingsView
from finledger.services.derivation import ensure_derived
from finledger.services.price_service import PriceService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class HoldingsAggregator:
    """
    Folds transactions into holdings and values them in USD.

    Percentages are shares of the total priced value. An asset whose price
    cannot be resolved stays in the result with value and percentage unset
    and the error recorded, unless strict mode asks for the error instead.
    """

    def __init__(self, price_service: PriceService, credit_accounts: Optional[Iterable[str]] = None):
        self._price_service = price_service
        self._credit_accounts = credit_accounts

    def get_holdings(
        self,
        transactions: Iterable[Transaction],
        as_of: date,
        strict: bool = False,
    ) -> HoldingsView:
        """Holdings per (asset, account)."""
        quantities = self._fold(transactions, as_of, by_account=True)
        items = [
            HoldingsSnapshot(asset=asset, account=account, quantity=qty)
            for (asset, account), qty in quantities.items()
        ]
        return self._value(items, as_of, strict)

    def get_holdings_by_asset(
        self,
        transactions: Iterable[Transaction],
        as_of: date,
        strict: bool = False,
    ) -> dict[str, HoldingsSnapshot]:
        """Holdings per asset, summed across accounts."""
        quantities = self._fold(transactions, as_of, by_account=False)
        items = [
            HoldingsSnapshot(asset=asset, quantity=qty)
            for (asset, _), qty in quantities.items()
        ]
        view = self._value(items, as_of, strict)
        return {item.asset: item for item in view.items}

    def _fold(
        self,
        transactions: Iterable[Transaction],
        as_of: date,
        by_account: bool,
    ) -> dict[tuple[str, Optional[str]], Decimal]:
        net: dict[tuple[str, Optional[str]], Decimal] = defaultdict(lambda: ZERO)
        for tx in ensure_derived(transactions, self._credit_accounts):
            if tx.date > as_of:
                continue
            key = (tx.asset, tx.account if by_account else None)
            net[key] += tx.delta_qty
        return {key: qty for key, qty in net.items() if qty != ZERO}

    def _value(
        self,
        items: list[HoldingsSnapshot],
        as_of: date,
        strict: bool,
    ) -> HoldingsView:
        view = HoldingsView(as_of=as_of)
        prices: dict[str, Decimal] = {}
        failed: dict[str, str] = {}

        for item in items:
            if item.asset not in prices and item.asset not in failed:
                try:
                    prices[item.asset] = self._price_service.get_price(item.asset, "USD", as_of)
                except PriceUnavailableError as exc:
                    if strict:
                        raise
                    logger.warning("Holding %s left unpriced: %s", item.asset, exc.message)
                    failed[item.asset] = exc.message

            if item.asset in prices:
                item.price_usd = prices[item.asset]
                item.value_usd = item.quantity * item.price_usd
                view.total_value_usd += item.value_usd
            else:
                item.price_error = failed[item.asset]

        for item in items:
            if item.value_usd is None:
                continue
            if view.total_value_usd == ZERO:
                item.percentage = ZERO
            else:
                item.percentage = item.value_usd / view.total_value_usd * HUNDRED

        view.unpriced = sorted(failed)
        view.items = sorted(
            items,
            key=lambda i: (
                i.value_usd is None,
                -(i.value_usd or ZERO),
                i.asset,
                i.account or "",
            ),
        )
        return view
