"""
Pytest configuration and fixtures for ledger tests.

This module provides:
- In-memory SQLite database fixtures
- Deterministic price sources
- Factory helpers for transactions
- Service and repository fixtures
- A FastAPI test client bound to the test database
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from finledger.main import app
from finledger.api.deps import get_uow_factory
from finledger.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from finledger.repositories.sqlalchemy import orm_models  # noqa: F401
from finledger.repositories.sqlalchemy import (
    SqlAlchemyTransactionRepository,
    SqlAlchemyUnitOfWork,
)
from finledger.providers import StaticPriceSource
from finledger.services import (
    ActionService,
    LedgerService,
    PositionLockRegistry,
    PriceService,
    ReportingService,
    TransactionCreate,
)
from finledger.domain.models import Transaction, TransactionType
from finledger.config.settings import Settings, reset_settings, set_settings


USD_VND = Decimal("25000")


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at an in-memory database."""
    reset_settings()
    settings = Settings(database_url="sqlite:///:memory:")
    set_settings(settings)
    yield settings
    reset_settings()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine(test_settings):
    """Create test database engine with shared in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(test_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_session(session_factory) -> Session:
    """Create test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def transaction_repo(test_session) -> SqlAlchemyTransactionRepository:
    """Provide test TransactionRepository."""
    return SqlAlchemyTransactionRepository(test_session)


@pytest.fixture
def uow_factory(session_factory) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Provide a unit-of-work factory on the test database."""
    return lambda: SqlAlchemyUnitOfWork(session_factory)


# =============================================================================
# PRICE FIXTURES
# =============================================================================


@pytest.fixture
def price_source() -> StaticPriceSource:
    """
    Deterministic prices.

    BTC moves from 40000 to 50000 across Q1 2024; ETH only has a March
    price; USD/VND is flat at 25000.
    """
    return StaticPriceSource({
        ("BTC", "USD"): {
            date(2024, 1, 1): Decimal("40000"),
            date(2024, 2, 1): Decimal("45000"),
            date(2024, 3, 1): Decimal("50000"),
        },
        ("ETH", "USD"): {
            date(2024, 3, 1): Decimal("3000"),
        },
        ("USD", "VND"): {
            date(2024, 1, 1): USD_VND,
        },
    })


@pytest.fixture
def price_service(price_source) -> PriceService:
    """Provide PriceService over the deterministic source."""
    return PriceService(source=price_source, pegged_assets=["USD", "USDT", "USDC"])


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def ledger_service(transaction_repo) -> LedgerService:
    """Provide test LedgerService."""
    return LedgerService(transaction_repo=transaction_repo)


@pytest.fixture
def reporting_service(transaction_repo, price_service, test_settings) -> ReportingService:
    """Provide test ReportingService."""
    return ReportingService(
        transaction_repo=transaction_repo,
        price_service=price_service,
        settings=test_settings,
    )


@pytest.fixture
def action_service(uow_factory, price_service) -> ActionService:
    """Provide ActionService with its own lock registry."""
    return ActionService(
        uow_factory=uow_factory,
        price_service=price_service,
        locks=PositionLockRegistry(),
    )


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def transaction_factory(ledger_service) -> Callable[..., Transaction]:
    """Factory recording transactions through the ledger service."""

    def _create_transaction(
        txn_type: TransactionType,
        asset: str,
        account: str,
        quantity: Decimal,
        price_local: Decimal = Decimal("1"),
        on: date = date(2024, 1, 1),
        **kwargs,
    ) -> Transaction:
        kwargs.setdefault("fx_to_vnd", USD_VND)
        return ledger_service.create_transaction(
            TransactionCreate(
                txn_type=txn_type,
                asset=asset,
                account=account,
                quantity=Decimal(quantity),
                price_local=Decimal(price_local),
                date=on,
                **kwargs,
            )
        )

    return _create_transaction


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(test_engine, session_factory) -> TestClient:
    """Provide FastAPI test client with test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_uow_factory] = (
        lambda: lambda: SqlAlchemyUnitOfWork(session_factory)
    )
    reset_database()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_database()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.01"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(Decimal(actual) - Decimal(expected))
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"


_counter = 0


def make_tx(
    txn_type: TransactionType,
    asset: str,
    account: str,
    quantity,
    price_local="1",
    on: date = date(2024, 1, 1),
    local_currency: str = "USD",
    fx_to_usd: Optional[Decimal] = None,
    fx_to_vnd: Optional[Decimal] = USD_VND,
    **kwargs,
) -> Transaction:
    """Build an underived in-memory transaction."""
    global _counter
    _counter += 1
    return Transaction(
        txn_id=f"tx-{_counter}",
        date=on,
        txn_type=txn_type,
        asset=asset,
        account=account,
        quantity=Decimal(quantity),
        price_local=Decimal(price_local),
        local_currency=local_currency,
        fx_to_usd=fx_to_usd,
        fx_to_vnd=fx_to_vnd,
        **kwargs,
    )


def stake_tx(
    investment_id: str,
    quantity,
    unit_price="1",
    on: date = date(2024, 1, 1),
    asset: str = "USDT",
    account: str = "Binance Earn",
    horizon: Optional[str] = None,
) -> Transaction:
    """Stake leg as written by the action layer."""
    return make_tx(
        TransactionType.STAKE,
        asset,
        "Wallet",
        quantity,
        unit_price,
        on,
        investment_id=investment_id,
        investment_account=account,
        horizon=horizon,
    )


def unstake_tx(
    investment_id: str,
    quantity,
    unit_price="1",
    on: date = date(2024, 1, 1),
    asset: str = "USDT",
    close_all: bool = False,
) -> Transaction:
    """Unstake leg as written by the action layer."""
    return make_tx(
        TransactionType.UNSTAKE,
        asset,
        "Wallet",
        quantity,
        unit_price,
        on,
        investment_id=investment_id,
        investment_account="Binance Earn",
        close_all=close_all,
    )
