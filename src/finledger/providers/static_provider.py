"""In-memory price table for offline use and tests."""

import bisect
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional

from finledger.core.exceptions import PriceUnavailableError
from finledger.providers.price_source import PricePoint


class StaticPriceSource:
    """
    Price source backed by an explicit table of (symbol, currency, date) prices.

    Lookups fall back to the latest price on or before the requested date;
    there is no forward fill from future prices.
    """

    def __init__(self, prices: Optional[dict[tuple[str, str], dict[date, Decimal]]] = None):
        self._dates: dict[tuple[str, str], list[date]] = {}
        self._prices: dict[tuple[str, str], dict[date, Decimal]] = {}
        for (symbol, currency), series in (prices or {}).items():
            for on, price in series.items():
                self.set_price(symbol, currency, on, price)

    def set_price(self, symbol: str, currency: str, on: date, price: Decimal) -> None:
        key = (symbol.upper(), currency.upper())
        series = self._prices.setdefault(key, {})
        dates = self._dates.setdefault(key, [])
        if on not in series:
            bisect.insort(dates, on)
        series[on] = price

    def price_on(self, symbol: str, currency: str, on: date) -> Decimal:
        key = (symbol.upper(), currency.upper())
        dates = self._dates.get(key, [])
        idx = bisect.bisect_right(dates, on)
        if idx == 0:
            raise PriceUnavailableError(symbol, currency, on)
        return self._prices[key][dates[idx - 1]]

    def price_range(
        self,
        symbol: str,
        currency: str,
        start: date,
        end: date,
    ) -> Iterator[PricePoint]:
        key = (symbol.upper(), currency.upper())
        dates = self._dates.get(key, [])
        lo = bisect.bisect_left(dates, start)
        hi = bisect.bisect_right(dates, end)
        for on in dates[lo:hi]:
            yield PricePoint(symbol.upper(), currency.upper(), on, self._prices[key][on])
