"""SQLAlchemy ORM model definitions."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SqlEnum,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.types import TypeDecorator

from finledger.domain.models.enums import TransactionType
from finledger.repositories.sqlalchemy.database import Base


class ExactDecimal(TypeDecorator):
    """
    Decimal stored as its canonical string.

    SQLite has no fixed-point type and would round-trip Numeric through
    float; amounts here must come back exactly as written.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect) -> Optional[str]:
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionORM(Base):
    """SQLAlchemy model for Transaction (ledger entry)."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_date", "date"),
        Index("idx_transactions_account_asset", "account", "asset"),
        Index("idx_transactions_investment", "investment_id"),
    )

    # Surrogate key doubles as insertion order for same-day ties
    id = Column(Integer, primary_key=True, autoincrement=True)
    txn_id = Column(String(36), unique=True, nullable=False)
    date = Column(Date, nullable=False)
    txn_type = Column(SqlEnum(TransactionType), nullable=False)
    asset = Column(String(32), nullable=False)
    account = Column(String(128), nullable=False)
    quantity = Column(ExactDecimal, nullable=False)
    price_local = Column(ExactDecimal, nullable=False)
    local_currency = Column(String(8), nullable=False)
    fx_to_usd = Column(ExactDecimal, nullable=True)
    fx_to_vnd = Column(ExactDecimal, nullable=True)
    fee_usd = Column(ExactDecimal, nullable=False, default=Decimal("0"))
    fee_vnd = Column(ExactDecimal, nullable=False, default=Decimal("0"))
    counterparty = Column(String(255), nullable=True)
    tag = Column(String(128), nullable=True)
    note = Column(Text, nullable=True)
    internal_flow = Column(Boolean, nullable=False, default=False)
    borrow_apr = Column(ExactDecimal, nullable=True)
    borrow_term_days = Column(Integer, nullable=True)
    investment_id = Column(String(36), nullable=True)
    investment_account = Column(String(128), nullable=True)
    horizon = Column(String(64), nullable=True)
    close_all = Column(Boolean, nullable=False, default=False)
    delta_qty = Column(ExactDecimal, nullable=True)
    cash_flow_usd = Column(ExactDecimal, nullable=True)
    cash_flow_vnd = Column(ExactDecimal, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
