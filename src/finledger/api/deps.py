"""Dependency injection for FastAPI."""

from fastapi import Depends
from sqlalchemy.orm import Session

from finledger.config.settings import get_settings
from finledger.providers import LedgerPriceSource
from finledger.repositories.sqlalchemy import (
    SqlAlchemyTransactionRepository,
    SqlAlchemyUnitOfWork,
)
from finledger.repositories.sqlalchemy.database import get_db, get_session_factory
from finledger.services import (
    ActionService,
    LedgerService,
    PriceService,
    ReportingService,
    get_position_locks,
)


def get_transaction_repo(db: Session = Depends(get_db)) -> SqlAlchemyTransactionRepository:
    """Provide TransactionRepository instance."""
    return SqlAlchemyTransactionRepository(db)


def get_price_service(
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
) -> PriceService:
    """Provide PriceService priced from the ledger's own trades."""
    return PriceService(
        source=LedgerPriceSource(transaction_repo),
        pegged_assets=get_settings().usd_pegged_assets,
    )


def get_ledger_service(
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
) -> LedgerService:
    """Provide LedgerService instance."""
    return LedgerService(
        transaction_repo=transaction_repo,
        credit_accounts=get_settings().credit_accounts,
    )


def get_reporting_service(
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
    price_service: PriceService = Depends(get_price_service),
) -> ReportingService:
    """Provide ReportingService instance."""
    return ReportingService(
        transaction_repo=transaction_repo,
        price_service=price_service,
        settings=get_settings(),
    )


def get_uow_factory():
    """Provide a factory of units of work, each on its own session."""
    session_factory = get_session_factory()
    return lambda: SqlAlchemyUnitOfWork(session_factory)


def get_action_service(
    uow_factory=Depends(get_uow_factory),
    price_service: PriceService = Depends(get_price_service),
) -> ActionService:
    """Provide ActionService instance sharing the process-wide position locks."""
    return ActionService(
        uow_factory=uow_factory,
        price_service=price_service,
        credit_accounts=get_settings().credit_accounts,
        locks=get_position_locks(),
    )
