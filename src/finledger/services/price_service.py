"""Price service: memoized lookups over an AssetPriceSource."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Iterator, Optional

from finledger.providers.price_source import AssetPriceSource, PricePoint

logger = logging.getLogger(__name__)


class PriceService:
    """
    Service for resolving asset prices.

    Wraps a provider with a per-(symbol, currency, date) cache. Pegged
    assets price at exactly 1 in the currency they track. Provider errors
    propagate; a missing price is never replaced by zero.
    """

    def __init__(
        self,
        source: AssetPriceSource,
        pegged_assets: Optional[Iterable[str]] = None,
    ):
        self._source = source
        self._pegged = {a.upper() for a in (pegged_assets or ("USD",))}
        self._cache: dict[tuple[str, str, date], Decimal] = {}

    def get_price(self, symbol: str, currency: str, on: date) -> Decimal:
        symbol = symbol.upper()
        currency = currency.upper()
        if symbol == currency or (currency == "USD" and symbol in self._pegged):
            return Decimal("1")

        key = (symbol, currency, on)
        if key not in self._cache:
            self._cache[key] = self._source.price_on(symbol, currency, on)
            logger.debug("Priced %s in %s on %s: %s", symbol, currency, on, self._cache[key])
        return self._cache[key]

    def get_price_range(
        self,
        symbol: str,
        currency: str,
        start: date,
        end: date,
    ) -> Iterator[PricePoint]:
        return self._source.price_range(symbol.upper(), currency.upper(), start, end)

    def clear_cache(self) -> None:
        self._cache.clear()
