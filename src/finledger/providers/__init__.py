"""Asset price providers."""

from finledger.providers.price_source import AssetPriceSource, PricePoint
from finledger.providers.static_provider import StaticPriceSource
from finledger.providers.ledger_provider import LedgerPriceSource

__all__ = [
    "AssetPriceSource",
    "PricePoint",
    "StaticPriceSource",
    "LedgerPriceSource",
]
