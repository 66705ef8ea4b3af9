"""SQLAlchemy implementation of TransactionRepository."""

from typing import Optional

from sqlalchemy import and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finledger.domain.models import Transaction
from finledger.repositories.protocols import TransactionFilter
from finledger.repositories.sqlalchemy.orm_models import TransactionORM


class SqlAlchemyTransactionRepository:
    """
    SQLAlchemy-backed transaction repository.

    With autocommit=False writes are only flushed; the owning unit of work
    decides when they commit.
    """

    def __init__(self, db: Session, autocommit: bool = True):
        self._db = db
        self._autocommit = autocommit

    def create(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        return self.create_many([transaction])[0]

    def create_many(self, transactions: list[Transaction]) -> list[Transaction]:
        """Persist several transactions; all or none become visible."""
        orm_txns = [self._to_orm(t) for t in transactions]
        self._db.add_all(orm_txns)
        if not self._autocommit:
            # Flushed by the unit of work's commit
            return list(transactions)
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise
        return [self._to_domain(o) for o in orm_txns]

    def get_by_id(self, txn_id: str) -> Optional[Transaction]:
        """Retrieve transaction by ID."""
        orm_txn = self._db.query(TransactionORM).filter(
            TransactionORM.txn_id == txn_id
        ).first()
        return self._to_domain(orm_txn) if orm_txn else None

    def query(self, txn_filter: Optional[TransactionFilter] = None) -> list[Transaction]:
        """Query transactions, ordered by date then insertion."""
        txn_filter = txn_filter or TransactionFilter()
        query = self._db.query(TransactionORM)

        conditions = []
        if txn_filter.start_date:
            conditions.append(TransactionORM.date >= txn_filter.start_date)
        if txn_filter.end_date:
            conditions.append(TransactionORM.date <= txn_filter.end_date)
        if txn_filter.txn_types:
            conditions.append(TransactionORM.txn_type.in_(txn_filter.txn_types))
        if txn_filter.accounts:
            conditions.append(TransactionORM.account.in_(txn_filter.accounts))
        if txn_filter.assets:
            conditions.append(TransactionORM.asset.in_(txn_filter.assets))
        if txn_filter.investment_id:
            conditions.append(TransactionORM.investment_id == txn_filter.investment_id)

        if conditions:
            query = query.filter(and_(*conditions))

        query = query.order_by(TransactionORM.date, TransactionORM.id)
        return [self._to_domain(t) for t in query.all()]

    @staticmethod
    def _to_orm(txn: Transaction) -> TransactionORM:
        """Convert domain model to ORM model."""
        return TransactionORM(
            txn_id=txn.txn_id,
            date=txn.date,
            txn_type=txn.txn_type,
            asset=txn.asset,
            account=txn.account,
            quantity=txn.quantity,
            price_local=txn.price_local,
            local_currency=txn.local_currency,
            fx_to_usd=txn.fx_to_usd,
            fx_to_vnd=txn.fx_to_vnd,
            fee_usd=txn.fee_usd,
            fee_vnd=txn.fee_vnd,
            counterparty=txn.counterparty,
            tag=txn.tag,
            note=txn.note,
            internal_flow=txn.internal_flow,
            borrow_apr=txn.borrow_apr,
            borrow_term_days=txn.borrow_term_days,
            investment_id=txn.investment_id,
            investment_account=txn.investment_account,
            horizon=txn.horizon,
            close_all=txn.close_all,
            delta_qty=txn.delta_qty,
            cash_flow_usd=txn.cash_flow_usd,
            cash_flow_vnd=txn.cash_flow_vnd,
            created_at=txn.created_at,
        )

    @staticmethod
    def _to_domain(orm: TransactionORM) -> Transaction:
        """Convert ORM model to domain model."""
        return Transaction(
            txn_id=orm.txn_id,
            date=orm.date,
            txn_type=orm.txn_type,
            asset=orm.asset,
            account=orm.account,
            quantity=orm.quantity,
            price_local=orm.price_local,
            local_currency=orm.local_currency,
            fx_to_usd=orm.fx_to_usd,
            fx_to_vnd=orm.fx_to_vnd,
            fee_usd=orm.fee_usd,
            fee_vnd=orm.fee_vnd,
            counterparty=orm.counterparty,
            tag=orm.tag,
            note=orm.note,
            internal_flow=bool(orm.internal_flow),
            borrow_apr=orm.borrow_apr,
            borrow_term_days=orm.borrow_term_days,
            investment_id=orm.investment_id,
            investment_account=orm.investment_account,
            horizon=orm.horizon,
            close_all=bool(orm.close_all),
            delta_qty=orm.delta_qty,
            cash_flow_usd=orm.cash_flow_usd,
            cash_flow_vnd=orm.cash_flow_vnd,
            created_at=orm.created_at,
        )
