"""Asset price source protocol and base types."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterator, Protocol


@dataclass(frozen=True)
class PricePoint:
    """Price of one unit of symbol, in currency, on a date."""

    symbol: str
    currency: str
    on: date
    price: Decimal


class AssetPriceSource(Protocol):
    """
    Protocol for historical price lookups.

    Implementations choose their own nearest-available-date policy but must
    raise PriceUnavailableError rather than return a placeholder price.
    """

    def price_on(self, symbol: str, currency: str, on: date) -> Decimal:
        """Return the price of symbol in currency as of a date."""
        ...

    def price_range(
        self,
        symbol: str,
        currency: str,
        start: date,
        end: date,
    ) -> Iterator[PricePoint]:
        """Yield known prices between start and end (inclusive), oldest first."""
        ...
