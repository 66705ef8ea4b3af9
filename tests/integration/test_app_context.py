"""
Integration tests for AppContext.

Tests cover:
- Initialization against a data directory
- Recording, staking and reporting without HTTP
"""

import pytest
from datetime import date
from decimal import Decimal

from finledger.app_context import AppContext
from finledger.config.settings import reset_settings
from finledger.domain.models import TransactionType
from finledger.domain.views import Period
from finledger.repositories.sqlalchemy.database import reset_database
from finledger.services import StakeRequest, TransactionCreate, UnstakeRequest


@pytest.fixture
def context(tmp_path) -> AppContext:
    """AppContext backed by a ledger.db under tmp_path."""
    ctx = AppContext()
    ctx.initialize(tmp_path)
    yield ctx
    ctx.close()
    reset_database()
    reset_settings()


class TestAppContext:
    """Tests for in-process service access."""

    def test_initialize_creates_database(self, context: AppContext, tmp_path):
        assert context.is_initialized
        assert context.data_dir == tmp_path
        assert (tmp_path / "ledger.db").exists()

    def test_services_share_the_store(self, context: AppContext):
        """
        GIVEN an initialized context
        WHEN a transaction is recorded and a stake is made
        THEN reports and listings see both after a session refresh
        """
        context.ledger.create_transaction(TransactionCreate(
            txn_type=TransactionType.INCOME,
            asset="USDT",
            account="Wallet",
            quantity=Decimal("500"),
            price_local=Decimal("1"),
            date=date(2024, 1, 1),
            fx_to_vnd=Decimal("25000"),
        ))
        staked = context.actions.stake(StakeRequest(
            date=date(2024, 1, 2),
            source_account="Wallet",
            investment_account="Earn",
            asset="USDT",
            amount=Decimal("200"),
            fx_to_vnd=Decimal("25000"),
        ))
        context.actions.unstake(UnstakeRequest(
            date=date(2024, 1, 20),
            investment_id=staked.position.investment_id,
            destination_account="Wallet",
            amount=Decimal("210"),
            close_all=True,
            fx_to_vnd=Decimal("25000"),
        ))

        context.refresh_session()
        holdings = context.reporting.get_holdings_by_asset(date(2024, 1, 31))
        pnl = context.reporting.get_pnl(Period(date(2024, 1, 1), date(2024, 1, 31)))

        assert holdings["USDT"].quantity == Decimal("510")
        assert pnl.realized_pnl_usd == Decimal("10")
        assert context.reporting.list_investments(is_open=False)[0].investment_id == (
            staked.position.investment_id
        )
