"""
Unit tests for CashFlowAggregator.

Tests cover:
- Inflow/outflow totals
- Operating vs financing split
- Borrowed principal as a financing inflow
- Internal flow exclusion
- Grouping by type and tag
"""

import pytest
from datetime import date
from decimal import Decimal

from finledger.domain.models import TransactionType
from finledger.domain.views import Period
from finledger.services import CashFlowAggregator

from tests.conftest import make_tx, USD_VND


Q1 = Period(date(2024, 1, 1), date(2024, 3, 31))


@pytest.fixture
def flows() -> list:
    return [
        make_tx(TransactionType.INCOME, "USD", "Bank", "200", on=date(2024, 1, 5), tag="Salary"),
        make_tx(TransactionType.EXPENSE, "USD", "Bank", "50", on=date(2024, 1, 6), tag="Food"),
        make_tx(TransactionType.BORROW, "USD", "Bank", "500", on=date(2024, 1, 7)),
        make_tx(TransactionType.REPAY_BORROW, "USD", "Bank", "100", on=date(2024, 2, 7)),
        make_tx(TransactionType.INTEREST_EXPENSE, "USD", "Bank", "10", on=date(2024, 2, 7)),
        make_tx(TransactionType.TRANSFER_OUT, "USD", "Bank", "30", on=date(2024, 2, 8), internal_flow=True),
    ]


class TestCashFlowTotals:
    """Tests for the overall and split totals."""

    def test_totals(self, flows):
        """
        GIVEN income 200, expense 50, borrow 500, repay 100, interest 10 and an internal transfer of 30
        WHEN cash flow is aggregated
        THEN inflows are 200 and outflows 160, since borrowing moves no derived cash
        """
        report = CashFlowAggregator().aggregate(flows, Q1)

        assert report.total_in_usd == Decimal("200")
        assert report.total_out_usd == Decimal("160")
        assert report.net_usd == Decimal("40")
        assert report.totals.count == 5

    def test_operating_financing_split(self, flows):
        """
        GIVEN the same flows
        WHEN cash flow is aggregated
        THEN operating is 200 in / 50 out and financing 500 in / 110 out
        """
        report = CashFlowAggregator().aggregate(flows, Q1)

        assert report.operating.inflow_usd == Decimal("200")
        assert report.operating.outflow_usd == Decimal("50")
        assert report.financing.inflow_usd == Decimal("500")
        assert report.financing.outflow_usd == Decimal("110")
        assert report.combined_net_usd == Decimal("540")

    def test_borrow_principal_counts_as_financing_inflow(self):
        """
        GIVEN a borrow of 1000 USD with fx_to_vnd 25000
        WHEN cash flow is aggregated
        THEN only financing carries the principal, in both currencies
        """
        report = CashFlowAggregator().aggregate(
            [make_tx(TransactionType.BORROW, "USD", "Bank", "1000", on=date(2024, 1, 7))],
            Q1,
        )

        assert report.financing.inflow_usd == Decimal("1000")
        assert report.financing.inflow_vnd == Decimal("1000") * USD_VND
        assert report.total_in_usd == Decimal("0")
        assert report.operating.inflow_usd == Decimal("0")
        assert report.by_type["borrow"].count == 1

    def test_grouped_by_type_and_tag(self, flows):
        report = CashFlowAggregator().aggregate(flows, Q1)

        assert report.by_type["borrow"].inflow_usd == Decimal("0")
        assert report.by_type["repay_borrow"].outflow_usd == Decimal("100")
        assert "transfer_out" not in report.by_type
        assert report.by_tag["Salary"].net_usd == Decimal("200")

    def test_period_bounds_inclusive(self, flows):
        report = CashFlowAggregator().aggregate(flows, Period(date(2024, 1, 5), date(2024, 1, 6)))

        assert report.total_in_usd == Decimal("200")
        assert report.total_out_usd == Decimal("50")

    def test_stake_legs_do_not_move_cash(self):
        txns = [
            make_tx(TransactionType.STAKE, "USDT", "Wallet", "100", on=date(2024, 1, 5)),
            make_tx(TransactionType.TRANSFER_IN, "USDT", "Earn", "100", on=date(2024, 1, 5), internal_flow=True),
        ]

        report = CashFlowAggregator().aggregate(txns, Q1)

        assert report.total_in_usd == Decimal("0")
        assert report.total_out_usd == Decimal("0")
