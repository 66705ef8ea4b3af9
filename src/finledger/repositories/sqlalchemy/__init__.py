"""SQLAlchemy repository implementations."""

from finledger.repositories.sqlalchemy.database import (
    get_session_factory,
    get_db,
    get_session,
    init_db,
    reset_database,
    Base,
)
from finledger.repositories.sqlalchemy.transaction_repo import SqlAlchemyTransactionRepository
from finledger.repositories.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "get_session_factory",
    "get_db",
    "get_session",
    "init_db",
    "reset_database",
    "Base",
    "SqlAlchemyTransactionRepository",
    "SqlAlchemyUnitOfWork",
]
