"""SQLAlchemy unit of work: one session transaction spanning several writes."""

import logging
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finledger.core.exceptions import InconsistentAtomicityError
from finledger.repositories.sqlalchemy.transaction_repo import SqlAlchemyTransactionRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """
    Stages repository writes in the session and commits them once.

    Repositories handed out here never commit on their own. Leaving the
    block without commit() rolls back.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._session: Session = None
        self._committed = False
        self.transactions: SqlAlchemyTransactionRepository = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self._session = self._session_factory()
        self._committed = False
        self.transactions = SqlAlchemyTransactionRepository(self._session, autocommit=False)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._committed:
            self.rollback()
        self._session.close()

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            logger.error("Unit of work commit failed: %s", exc)
            self.rollback()
            raise InconsistentAtomicityError(
                f"Paired write could not be committed: {exc}"
            ) from exc
        self._committed = True

    def rollback(self) -> None:
        self._session.rollback()
