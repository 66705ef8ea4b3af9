"""
Unit tests for HoldingsAggregator.

Tests cover:
- Net quantity folding per asset and account
- As-of cutoff
- Valuation and percentages
- Unpriced assets and strict mode
"""

import pytest
from datetime import date
from decimal import Decimal

from finledger.core.exceptions import PriceUnavailableError
from finledger.domain.models import TransactionType
from finledger.services import HoldingsAggregator, PriceService

from tests.conftest import assert_decimal_equal, make_tx


@pytest.fixture
def aggregator(price_service: PriceService) -> HoldingsAggregator:
    return HoldingsAggregator(price_service)


@pytest.fixture
def portfolio() -> list:
    return [
        make_tx(TransactionType.BUY, "BTC", "Exchange", "1", "40000", date(2024, 1, 5)),
        make_tx(TransactionType.BUY, "BTC", "Ledger", "0.5", "45000", date(2024, 2, 5)),
        make_tx(TransactionType.INCOME, "USDT", "Exchange", "5000", "1", date(2024, 2, 10)),
        make_tx(TransactionType.EXPENSE, "USDT", "Exchange", "1000", "1", date(2024, 2, 11)),
        make_tx(TransactionType.SELL, "BTC", "Exchange", "0.2", "50000", date(2024, 3, 5)),
    ]


class TestHoldingsQuantities:
    """Tests for folding deltas into holdings."""

    def test_holdings_per_account(self, aggregator: HoldingsAggregator, portfolio):
        """
        GIVEN buys, income, an expense and a sell across two accounts
        WHEN holdings are taken as of the end of March
        THEN each (asset, account) carries its net quantity
        """
        view = aggregator.get_holdings(portfolio, date(2024, 3, 31))

        quantities = {(i.asset, i.account): i.quantity for i in view.items}
        assert quantities == {
            ("BTC", "Exchange"): Decimal("0.8"),
            ("BTC", "Ledger"): Decimal("0.5"),
            ("USDT", "Exchange"): Decimal("4000"),
        }

    def test_as_of_excludes_later_transactions(self, aggregator: HoldingsAggregator, portfolio):
        """
        GIVEN transactions before and after Feb 1
        WHEN holdings are taken as of Feb 1
        THEN only the January buy counts
        """
        view = aggregator.get_holdings(portfolio, date(2024, 2, 1))

        assert len(view.items) == 1
        assert view.items[0].quantity == Decimal("1")
        assert view.items[0].value_usd == Decimal("45000")

    def test_by_asset_sums_accounts(self, aggregator: HoldingsAggregator, portfolio):
        holdings = aggregator.get_holdings_by_asset(portfolio, date(2024, 3, 31))

        assert holdings["BTC"].quantity == Decimal("1.3")
        assert holdings["BTC"].account is None
        assert holdings["USDT"].value_usd == Decimal("4000")

    def test_zero_balances_are_dropped(self, aggregator: HoldingsAggregator):
        txns = [
            make_tx(TransactionType.INCOME, "USD", "Bank", "100"),
            make_tx(TransactionType.EXPENSE, "USD", "Bank", "100"),
        ]

        view = aggregator.get_holdings(txns, date(2024, 1, 1))

        assert view.items == []
        assert view.total_value_usd == Decimal("0")


class TestHoldingsValuation:
    """Tests for USD valuation and weights."""

    def test_percentages_sum_to_100(self, aggregator: HoldingsAggregator, portfolio):
        """
        GIVEN priced holdings
        WHEN holdings are valued
        THEN percentages add up to 100
        """
        view = aggregator.get_holdings(portfolio, date(2024, 3, 31))

        total_pct = sum(i.percentage for i in view.items)
        assert_decimal_equal(total_pct, Decimal("100"), Decimal("0.0000001"))
        # 0.8 BTC + 0.5 BTC at 50000, plus 4000 USDT
        assert view.total_value_usd == Decimal("69000")

    def test_sorted_by_value_descending(self, aggregator: HoldingsAggregator, portfolio):
        view = aggregator.get_holdings(portfolio, date(2024, 3, 31))

        values = [i.value_usd for i in view.items]
        assert values == sorted(values, reverse=True)

    def test_unpriced_asset_kept_without_value(self, aggregator: HoldingsAggregator, portfolio):
        """
        GIVEN a holding of an asset with no price source entry
        WHEN holdings are valued
        THEN it keeps its quantity, has no value or weight and is listed as unpriced
        """
        txns = portfolio + [make_tx(TransactionType.BUY, "DOGE", "Exchange", "1000", "0.1", date(2024, 3, 1))]

        view = aggregator.get_holdings(txns, date(2024, 3, 31))

        doge = next(i for i in view.items if i.asset == "DOGE")
        assert doge.quantity == Decimal("1000")
        assert doge.value_usd is None
        assert doge.percentage is None
        assert "DOGE" in doge.price_error
        assert view.unpriced == ["DOGE"]
        assert view.items[-1] is doge
        assert_decimal_equal(
            sum(i.percentage for i in view.items if i.is_priced), Decimal("100"), Decimal("0.0000001")
        )

    def test_strict_mode_propagates_price_error(self, aggregator: HoldingsAggregator):
        txns = [make_tx(TransactionType.BUY, "DOGE", "Exchange", "1000", "0.1")]

        with pytest.raises(PriceUnavailableError):
            aggregator.get_holdings(txns, date(2024, 3, 31), strict=True)

    def test_pegged_assets_price_at_one(self, aggregator: HoldingsAggregator):
        txns = [make_tx(TransactionType.INCOME, "USDC", "Wallet", "250")]

        view = aggregator.get_holdings(txns, date(2024, 1, 1))

        assert view.items[0].price_usd == Decimal("1")
        assert view.items[0].percentage == Decimal("100")
