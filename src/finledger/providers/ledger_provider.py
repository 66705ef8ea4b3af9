"""Price source that reads last traded prices out of the transaction store."""

from datetime import date
from decimal import Decimal
from typing import Iterator, Optional

from finledger.core.exceptions import PriceUnavailableError
from finledger.domain.models import Transaction, TransactionType
from finledger.providers.price_source import PricePoint
from finledger.repositories.protocols import TransactionFilter, TransactionRepository

# Transactions whose price_local is a market price for the asset
PRICED_TYPES = [
    TransactionType.BUY,
    TransactionType.SELL,
    TransactionType.STAKE,
    TransactionType.UNSTAKE,
]


class LedgerPriceSource:
    """
    Prices an asset at its most recent trade on or before the date.

    Useful when no market feed is configured: every buy, sell, stake or
    unstake records what one unit was worth that day.
    """

    def __init__(self, transaction_repo: TransactionRepository):
        self._transaction_repo = transaction_repo

    def price_on(self, symbol: str, currency: str, on: date) -> Decimal:
        trades = self._trades(symbol, end=on)
        for tx in reversed(trades):
            price = self._price_in(tx, currency)
            if price is not None:
                return price
        raise PriceUnavailableError(symbol, currency, on)

    def price_range(
        self,
        symbol: str,
        currency: str,
        start: date,
        end: date,
    ) -> Iterator[PricePoint]:
        last: dict[date, Decimal] = {}
        for tx in self._trades(symbol, start=start, end=end):
            price = self._price_in(tx, currency)
            if price is not None:
                last[tx.date] = price
        for on in sorted(last):
            yield PricePoint(symbol, currency.upper(), on, last[on])

    def _trades(
        self,
        symbol: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Transaction]:
        return self._transaction_repo.query(
            TransactionFilter(
                start_date=start,
                end_date=end,
                txn_types=PRICED_TYPES,
                assets=[symbol],
            )
        )

    @staticmethod
    def _price_in(tx: Transaction, currency: str) -> Optional[Decimal]:
        if not tx.price_local:
            return None
        currency = currency.upper()
        if currency == tx.local_currency.upper():
            return tx.price_local
        if currency == "USD" and tx.rate_to_usd is not None:
            return tx.price_local * tx.rate_to_usd
        if currency == "VND" and tx.rate_to_vnd is not None:
            return tx.price_local * tx.rate_to_vnd
        return None
